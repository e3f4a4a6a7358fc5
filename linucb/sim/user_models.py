from typing import Dict, Hashable, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from linucb.errors import InvalidInput

ContextKey = Tuple[float, ...]


def context_key(x) -> ContextKey:
    return tuple(float(v) for v in np.asarray(x, dtype=float).reshape(-1))


class UserModel:
    """
    Data source for the round loop: draws a context, then reveals the reward
    of whichever arm was chosen for it.

    Hidden parameters, contexts and reward noise use three generators spawned
    from one seed, so two users built with the same seed show the same
    context stream no matter which arms a policy picks.
    """
    def __init__(self, arms: Sequence[Hashable], d: int, seed: Optional[int] = 0):
        self.arms: List[Hashable] = list(arms)
        self.d = d
        param_seq, ctx_seq, noise_seq = np.random.SeedSequence(seed).spawn(3)
        self.param_rng = np.random.default_rng(param_seq)
        self.ctx_rng = np.random.default_rng(ctx_seq)
        self.noise_rng = np.random.default_rng(noise_seq)

    def sample_context(self) -> np.ndarray:
        raise NotImplementedError

    def expected_reward(self, arm: Hashable, x: np.ndarray) -> float:
        raise NotImplementedError

    def reward(self, arm: Hashable, x: np.ndarray) -> float:
        """Click (1.0) with the arm's expected reward as probability, else 0.0."""
        return 1.0 if self.noise_rng.random() < self.expected_reward(arm, x) else 0.0


class BernoulliClickUser(UserModel):
    """
    Click/no-click simulator:
    - Context x is drawn uniformly from a fixed list of prototype contexts
    - Arm a clicks on context c with probability click_probs[a][c],
      falling back to click_probs[a]["*"], then to default_prob
    """
    def __init__(self, contexts: Sequence[Sequence[float]],
                 click_probs: Mapping[Hashable, Mapping[object, float]],
                 arms: Optional[Sequence[Hashable]] = None,
                 default_prob: float = 0.1, seed: Optional[int] = 0):
        if not contexts:
            raise InvalidInput("need at least one prototype context")
        prototypes = [np.asarray(c, dtype=float) for c in contexts]
        d = prototypes[0].shape[0]
        if any(c.shape != (d,) for c in prototypes):
            raise InvalidInput("prototype contexts must share one length")

        probs: Dict[Hashable, Dict[object, float]] = {}
        for arm, table in click_probs.items():
            probs[arm] = {}
            for key, p in table.items():
                if not 0.0 <= p <= 1.0:
                    raise InvalidInput(f"click probability {p} for arm {arm!r} outside [0,1]")
                probs[arm][key if key == "*" else context_key(key)] = float(p)

        super().__init__(arms if arms is not None else list(probs), d, seed)
        self.contexts = prototypes
        self.probs = probs
        self.default_prob = float(default_prob)

    def sample_context(self) -> np.ndarray:
        return self.contexts[self.ctx_rng.integers(len(self.contexts))].copy()

    def expected_reward(self, arm: Hashable, x: np.ndarray) -> float:
        table = self.probs.get(arm, {})
        key = context_key(x)
        if key in table:
            return table[key]
        return table.get("*", self.default_prob)


def click_scenario(seed: Optional[int] = 0) -> BernoulliClickUser:
    """Two one-hot contexts, three arms; arm 1 clicks 80% of the time on [1, 0], everything else 10%."""
    return BernoulliClickUser(
        contexts=[[1.0, 0.0], [0.0, 1.0]],
        click_probs={1: {(1.0, 0.0): 0.8}},
        arms=[1, 2, 3],
        default_prob=0.1,
        seed=seed,
    )


class SyntheticUser(UserModel):
    """
    Gaussian contexts with a hidden logistic response per arm.
    Expected reward is logistic(w_a . x). Rewards are either clicks drawn
    with that probability (clicks=True) or the expectation plus Gaussian
    noise, clipped to [0, 1].
    """
    def __init__(self, d: int, arms: Sequence[Hashable], seed: Optional[int] = 0,
                 noise_sd: float = 0.05, clicks: bool = False):
        super().__init__(arms, d, seed)
        self.noise_sd = noise_sd
        self.clicks = clicks
        self.weights = {a: self.param_rng.standard_normal(d) for a in self.arms}

    def sample_context(self) -> np.ndarray:
        return self.ctx_rng.standard_normal(self.d)

    def expected_reward(self, arm: Hashable, x: np.ndarray) -> float:
        z = float(self.weights[arm] @ x)
        return 0.5 * (1.0 + float(np.tanh(0.5 * z)))  # logistic without exp overflow

    def reward(self, arm: Hashable, x: np.ndarray) -> float:
        if self.clicks:
            return super().reward(arm, x)
        noisy = self.expected_reward(arm, x) + self.noise_rng.normal(0.0, self.noise_sd)
        return float(min(max(noisy, 0.0), 1.0))


def oracle_reward(user: UserModel, x: np.ndarray) -> float:
    """Best achievable expected reward for context x across all of the user's arms."""
    return max(user.expected_reward(a, x) for a in user.arms)
