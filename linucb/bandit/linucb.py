import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Hashable, Iterable, List, Optional

import numpy as np

from linucb.contexts import as_context
from linucb.errors import InvalidInput, SingularMatrix

logger = logging.getLogger(__name__)

# relative tolerance under which two UCB values count as tied
TIE_RTOL = 1e-12
# rounding slack allowed below zero for x^T A^-1 x, relative to x^T x
WIDTH_ATOL = 1e-12


@dataclass
class ArmState:
    A: np.ndarray
    b: np.ndarray
    A_inv: Optional[np.ndarray] = None  # only kept in incremental mode
    pulls: int = 0

    @classmethod
    def fresh(cls, d: int, incremental: bool = False) -> "ArmState":
        return cls(A=np.eye(d), b=np.zeros(d), A_inv=np.eye(d) if incremental else None)


def _check_hashable(arm: Hashable) -> None:
    try:
        hash(arm)
    except TypeError as exc:
        raise InvalidInput(f"arm identifier must be hashable: {arm!r}") from exc


class LinUCB:
    """
    LinUCB with disjoint linear models.
    Each arm keeps its own ridge regression (A, b), created lazily the first
    time the arm is scored or updated. Arms can be any hashable identifier.

    With incremental=True the inverse of A is maintained by Sherman–Morrison
    rank-one updates instead of being recomputed on every score.
    """
    def __init__(self, alpha: float = 1.0, d: Optional[int] = None,
                 seed: Any = None, incremental: bool = False):
        try:
            alpha = float(alpha)
        except (TypeError, ValueError) as exc:
            raise InvalidInput(f"alpha must be a real number, got {alpha!r}") from exc
        if not np.isfinite(alpha) or alpha < 0:
            raise InvalidInput(f"alpha must be finite and >= 0, got {alpha}")
        if d is not None and int(d) <= 0:
            raise InvalidInput(f"d must be positive, got {d}")
        self.alpha = alpha
        self.d = int(d) if d is not None else None
        self.incremental = incremental
        self.rng = np.random.default_rng(seed)
        self.lock = threading.RLock()
        self._state: Dict[Hashable, ArmState] = {}

    # --- internals ---
    def _context(self, context: Any) -> np.ndarray:
        return as_context(context, self.d)

    def _fix_dimension(self, x: np.ndarray) -> None:
        # called only once a call has passed validation
        if self.d is None:
            self.d = x.shape[0]
            logger.debug("context dimensionality fixed at d=%d", self.d)

    def _arm(self, arm: Hashable) -> ArmState:
        state = self._state.get(arm)
        if state is None:
            state = ArmState.fresh(self.d, self.incremental)
            self._state[arm] = state
            logger.debug("materialized arm %r (d=%d)", arm, self.d)
        return state

    def _inverse(self, arm: Hashable, state: ArmState) -> np.ndarray:
        if self.incremental:
            return state.A_inv
        try:
            A_inv = np.linalg.inv(state.A)
        except np.linalg.LinAlgError as exc:
            logger.error("design matrix of arm %r is singular", arm)
            raise SingularMatrix(f"cannot invert A for arm {arm!r}: {exc}") from exc
        if not np.all(np.isfinite(A_inv)):
            logger.error("inverse of arm %r has non-finite entries", arm)
            raise SingularMatrix(f"non-finite inverse for arm {arm!r}")
        return A_inv

    def _ucb(self, arm: Hashable, x: np.ndarray) -> float:
        state = self._arm(arm)
        A_inv = self._inverse(arm, state)
        theta = A_inv @ state.b
        p = float(x @ theta)
        q = float(x @ A_inv @ x)
        if not np.isfinite(q) or q < -WIDTH_ATOL * max(1.0, float(x @ x)):
            logger.error("arm %r has a non positive-definite inverse", arm)
            raise SingularMatrix(f"degenerate confidence width for arm {arm!r}")
        return p + self.alpha * float(np.sqrt(max(q, 0.0)))

    # --- API ---
    @property
    def arms(self) -> List[Hashable]:
        """Known arms in the order they were first seen."""
        with self.lock:
            return list(self._state)

    def pulls(self, arm: Hashable) -> int:
        _check_hashable(arm)
        with self.lock:
            state = self._state.get(arm)
            return state.pulls if state is not None else 0

    def theta(self, arm: Hashable) -> np.ndarray:
        """Ridge estimate A^-1 b for the arm (zeros for an arm never updated)."""
        _check_hashable(arm)
        with self.lock:
            if self.d is None:
                raise InvalidInput("dimensionality unknown until a context is seen")
            state = self._arm(arm)
            return self._inverse(arm, state) @ state.b

    def score(self, arm: Hashable, context: Any) -> float:
        """Upper confidence bound x^T theta + alpha * sqrt(x^T A^-1 x) for one arm."""
        _check_hashable(arm)
        with self.lock:
            x = self._context(context)
            self._fix_dimension(x)
            return self._ucb(arm, x)

    def scores(self, context: Any, candidate_arms: Iterable[Hashable]) -> Dict[Hashable, float]:
        try:
            candidates = list(dict.fromkeys(candidate_arms))
        except TypeError as exc:
            raise InvalidInput(f"candidate arms must be hashable: {exc}") from exc
        if not candidates:
            raise InvalidInput("select needs at least one candidate arm")
        with self.lock:
            x = self._context(context)
            self._fix_dimension(x)
            return {a: self._ucb(a, x) for a in candidates}

    def select(self, context: Any, candidate_arms: Iterable[Hashable]) -> Hashable:
        """Pick the candidate with the highest UCB; ties are broken uniformly at random."""
        with self.lock:
            ucb = self.scores(context, candidate_arms)
            arms = list(ucb)
            vals = np.array([ucb[a] for a in arms])
            best = vals.max()
            tied = np.flatnonzero(np.isclose(vals, best, rtol=TIE_RTOL, atol=TIE_RTOL))
            if tied.size == 1:
                return arms[int(tied[0])]
            return arms[int(self.rng.choice(tied))]

    def update(self, arm: Hashable, context: Any, reward: float) -> None:
        """Fold the observed reward into the chosen arm's model: A += x x^T, b += r x."""
        _check_hashable(arm)
        try:
            r = float(reward)
        except (TypeError, ValueError) as exc:
            raise InvalidInput(f"reward must be a real number, got {reward!r}") from exc
        if not np.isfinite(r):
            raise InvalidInput(f"reward must be finite, got {r}")

        with self.lock:
            x = self._context(context)
            self._fix_dimension(x)
            state = self._arm(arm)
            if self.incremental:
                # Sherman–Morrison: A^-1 <- A^-1 - (A^-1 x x^T A^-1) / (1 + x^T A^-1 x)
                z = state.A_inv @ x
                denom = 1.0 + float(x @ z)
                if not np.isfinite(denom) or denom <= 0.0:
                    logger.error("Sherman-Morrison update of arm %r is degenerate", arm)
                    raise SingularMatrix(f"rank-one update failed for arm {arm!r}")
                state.A_inv -= np.outer(z, z) / denom
            state.A += np.outer(x, x)
            state.b += r * x
            state.pulls += 1
