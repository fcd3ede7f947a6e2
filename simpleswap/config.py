"""
Engine configuration.

Sources, in increasing precedence:
- `EngineConfig` defaults,
- a YAML file (`load_config`), fail-closed on unknown keys,
- `SIMPLESWAP_*` environment variables (`config_from_env`).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml

from .state.balances import MAX_UINT256, ZERO_ADDRESS

PRICE_SCALE = 10**18
DEFAULT_ENGINE_ADDRESS = "0x" + "5e" * 20


@dataclass(frozen=True)
class EngineConfig:
    # Fixed-point scale for get_price (units of B per unit of A).
    price_scale: int = PRICE_SCALE
    # Amount arguments and stored reserves/shares above this bound are rejected
    # with OVERFLOW, keeping amounts inside the 256-bit domain.
    max_amount: int = MAX_UINT256
    # Custody account holding every pool's reserves in the asset ledger.
    engine_address: str = DEFAULT_ENGINE_ADDRESS

    def __post_init__(self) -> None:
        for name in ("price_scale", "max_amount"):
            v = getattr(self, name)
            if not isinstance(v, int) or isinstance(v, bool) or v <= 0:
                raise ValueError(f"{name} must be a positive int")
        if not isinstance(self.engine_address, str) or not self.engine_address:
            raise ValueError("engine_address must be a non-empty string")
        if self.engine_address == ZERO_ADDRESS:
            raise ValueError("engine_address must not be the zero address")


def _coerce_int(name: str, value: Any) -> int:
    # Quoted decimal strings are accepted as well as ints.
    if isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise TypeError(f"{name} must be an int")


def config_from_mapping(obj: Mapping[str, Any], *, base: Optional[EngineConfig] = None) -> EngineConfig:
    if not isinstance(obj, Mapping):
        raise TypeError("config must be a mapping")
    known = {f.name for f in fields(EngineConfig)}
    unknown = sorted(set(obj) - known)
    if unknown:
        raise ValueError(f"unknown config keys: {unknown}")

    updates: dict[str, Any] = {}
    for key, value in obj.items():
        if key in ("price_scale", "max_amount"):
            updates[key] = _coerce_int(key, value)
        else:
            if not isinstance(value, str):
                raise TypeError(f"{key} must be a string")
            updates[key] = value
    return replace(base or EngineConfig(), **updates)


def load_config(path: Union[str, Path]) -> EngineConfig:
    """Load an EngineConfig from a YAML file (top-level `engine:` mapping or flat)."""
    return config_from_mapping(_yaml_section(path))


def _env_int(name: str, default: int, *, lo: int, hi: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return int(default)
    try:
        v = int(raw.strip())
    except Exception:
        return int(default)
    if v < lo:
        return int(lo)
    if v > hi:
        return int(hi)
    return int(v)


def _env_str(name: str, default: str) -> str:
    raw = os.environ.get(name)
    if raw is None:
        return default
    v = raw.strip()
    return v if v else default


def config_from_env(base: Optional[EngineConfig] = None) -> EngineConfig:
    """
    Apply SIMPLESWAP_CONFIG (YAML path), SIMPLESWAP_PRICE_SCALE,
    SIMPLESWAP_MAX_AMOUNT and SIMPLESWAP_ENGINE_ADDRESS on top of `base`.
    """
    cfg = base or EngineConfig()
    path = _env_str("SIMPLESWAP_CONFIG", "")
    if path:
        cfg = config_from_mapping(_yaml_section(path), base=cfg)
    return replace(
        cfg,
        price_scale=_env_int("SIMPLESWAP_PRICE_SCALE", cfg.price_scale, lo=1, hi=10**36),
        max_amount=_env_int("SIMPLESWAP_MAX_AMOUNT", cfg.max_amount, lo=1, hi=MAX_UINT256),
        engine_address=_env_str("SIMPLESWAP_ENGINE_ADDRESS", cfg.engine_address),
    )


def _yaml_section(path: Union[str, Path]) -> Mapping[str, Any]:
    obj = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(obj, Mapping):
        raise TypeError("config YAML must be a mapping")
    return obj.get("engine", obj)
