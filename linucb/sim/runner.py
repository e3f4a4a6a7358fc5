import logging
from dataclasses import dataclass
from typing import Hashable, List, Optional, Sequence

import numpy as np

from linucb.bandit.linucb import LinUCB
from linucb.errors import InvalidInput
from linucb.sim.user_models import context_key, oracle_reward

logger = logging.getLogger(__name__)


@dataclass
class Round:
    t: int
    context: np.ndarray
    arm: Hashable
    reward: float
    expected: float  # expected reward of the chosen arm
    oracle: float    # best expected reward available in this context


def run_rounds(bandit: LinUCB, user, rounds: int,
               candidate_arms: Optional[Sequence[Hashable]] = None) -> List[Round]:
    """
    Online loop: observe context, select, reveal reward, update with the same context.
    Candidates default to every arm the user knows about.
    """
    if rounds <= 0:
        raise InvalidInput(f"rounds must be positive, got {rounds}")
    arms = list(candidate_arms) if candidate_arms is not None else list(user.arms)

    history: List[Round] = []
    for t in range(rounds):
        x = user.sample_context()
        a = bandit.select(x, arms)
        r = user.reward(a, x)
        bandit.update(a, x, r)
        history.append(Round(t=t, context=x, arm=a, reward=r,
                             expected=user.expected_reward(a, x),
                             oracle=oracle_reward(user, x)))

    logger.info("ran %d rounds over %d arms, mean reward %.4f",
                rounds, len(arms), float(np.mean([h.reward for h in history])))
    return history


def windowed_selection_rate(history: Sequence[Round], arm: Hashable,
                            context: Optional[Sequence[float]] = None,
                            window: int = 100) -> List[float]:
    """
    Fraction of rounds choosing arm, per consecutive window of rounds.
    With context given, only rounds that observed that context count;
    windows without such rounds give nan.
    """
    if window <= 0:
        raise InvalidInput(f"window must be positive, got {window}")
    key = context_key(context) if context is not None else None

    rates: List[float] = []
    for start in range(0, len(history), window):
        chunk = [h for h in history[start:start + window]
                 if key is None or context_key(h.context) == key]
        if not chunk:
            rates.append(float("nan"))
            continue
        rates.append(sum(1 for h in chunk if h.arm == arm) / len(chunk))
    return rates


def cumulative_reward(history: Sequence[Round]) -> np.ndarray:
    return np.cumsum([h.reward for h in history])


def cumulative_regret(history: Sequence[Round]) -> np.ndarray:
    """Regret against the oracle's expected reward, using the chosen arm's expected reward."""
    return np.cumsum([h.oracle - h.expected for h in history])
