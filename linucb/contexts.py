from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from linucb.errors import InvalidInput


def as_context(x: Any, d: Optional[int] = None) -> np.ndarray:
    """
    Coerce x into a 1-D float64 context vector.
    Raises InvalidInput on a bad shape, non-finite values or a length other than d.
    """
    try:
        vec = np.asarray(x, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise InvalidInput(f"context is not numeric: {exc}") from exc

    if vec.ndim == 2 and 1 in vec.shape:
        vec = vec.reshape(-1)  # accept (d,1) / (1,d) column or row vectors
    if vec.ndim != 1:
        raise InvalidInput(f"context must be 1-D, got shape {vec.shape}")
    if vec.shape[0] == 0:
        raise InvalidInput("context must not be empty")
    if d is not None and vec.shape[0] != d:
        raise InvalidInput(f"context length {vec.shape[0]} != d={d}")
    if not np.all(np.isfinite(vec)):
        raise InvalidInput("context contains NaN or inf")
    return vec


def one_hot(index: int, d: int) -> np.ndarray:
    if not 0 <= index < d:
        raise InvalidInput(f"one_hot index {index} out of range for d={d}")
    vec = np.zeros(d, dtype=np.float64)
    vec[index] = 1.0
    return vec


def vectorize_context(ctx: Dict[str, Any], keys: Sequence[str]) -> List[float]:
    """
    Convert a feature dict to a flat numeric vector for the bandit.
    Ordering follows keys; list-valued features are spliced in place.
    """
    vec: List[float] = []
    for key in keys:
        if key not in ctx:
            raise InvalidInput(f"context feature '{key}' missing")
        val = ctx[key]
        if isinstance(val, (list, tuple, np.ndarray)):
            vec += [float(v) for v in val]
        else:
            vec += [float(val)]
    return vec
