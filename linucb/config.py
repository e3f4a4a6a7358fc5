"""Hyperparameters for the estimator and the simulation loop.

Values come from keyword arguments, a plain dict, or ``LINUCB_*``
environment variables (``LINUCB_ALPHA=0.5 python -m experiments.run_sim``).
"""

from __future__ import annotations

import math
import numbers
import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional

from linucb.bandit.linucb import LinUCB
from linucb.errors import InvalidInput

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class BanditConfig:
    alpha: float = 1.0
    seed: Optional[int] = None
    incremental: bool = False
    rounds: int = 1000
    window: int = 100  # rounds per diagnostic window

    def __post_init__(self) -> None:
        if isinstance(self.alpha, bool) or not isinstance(self.alpha, numbers.Real):
            raise InvalidInput(f"alpha must be a real number, got {self.alpha!r}")
        if not math.isfinite(self.alpha) or self.alpha < 0:
            raise InvalidInput(f"alpha must be finite and >= 0, got {self.alpha}")
        if self.seed is not None and (isinstance(self.seed, bool)
                                      or not isinstance(self.seed, numbers.Integral)):
            raise InvalidInput(f"seed must be an integer or None, got {self.seed!r}")
        if not isinstance(self.incremental, bool):
            raise InvalidInput(f"incremental must be a bool, got {self.incremental!r}")
        for name in ("rounds", "window"):
            val = getattr(self, name)
            if isinstance(val, bool) or not isinstance(val, numbers.Integral):
                raise InvalidInput(f"{name} must be an integer, got {val!r}")
            if val <= 0:
                raise InvalidInput(f"{name} must be positive, got {val}")

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> BanditConfig:
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in d.items() if k in known})

    @classmethod
    def from_env(cls, prefix: str = "LINUCB_",
                 environ: Optional[Mapping[str, str]] = None) -> BanditConfig:
        env = os.environ if environ is None else environ
        raw: Dict[str, Any] = {}
        try:
            if env.get(prefix + "ALPHA"):
                raw["alpha"] = float(env[prefix + "ALPHA"])
            if env.get(prefix + "SEED"):
                raw["seed"] = int(env[prefix + "SEED"])
            if env.get(prefix + "ROUNDS"):
                raw["rounds"] = int(env[prefix + "ROUNDS"])
            if env.get(prefix + "WINDOW"):
                raw["window"] = int(env[prefix + "WINDOW"])
        except ValueError as exc:
            raise InvalidInput(f"malformed {prefix}* environment variable: {exc}") from exc

        flag = env.get(prefix + "INCREMENTAL")
        if flag is not None:
            flag = flag.strip().lower()
            if flag not in _TRUE | _FALSE:
                raise InvalidInput(f"{prefix}INCREMENTAL must be a boolean flag, got {flag!r}")
            raw["incremental"] = flag in _TRUE
        return cls(**raw)


def build_bandit(config: BanditConfig, d: Optional[int] = None) -> LinUCB:
    return LinUCB(alpha=config.alpha, d=d, seed=config.seed, incremental=config.incremental)
