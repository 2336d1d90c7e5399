"""
Host configuration.

`HostConfig` is a frozen dataclass with safe defaults. `load_config` layers,
in order: defaults, an optional YAML mapping, then `TOKENSWAP_*` environment
variables. Unknown keys and wrongly-typed values are rejected.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml


@dataclass(frozen=True)
class HostConfig:
    # Label mixed into authorization signing payloads so that signatures for
    # one deployment are useless on another.
    chain_id: str = "tokenswap-local"
    # Ledger sequence at host start; allowances expire against this counter.
    initial_sequence: int = 1
    # Reject a nested call into a contract that is already executing.
    reentrancy_guard: bool = True
    # Re-check every contract's invariants after each committed invocation.
    check_invariants: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.chain_id, str) or not self.chain_id:
            raise ValueError("chain_id must be a non-empty string")
        if "\x00" in self.chain_id or not self.chain_id.isascii():
            raise ValueError("chain_id must be ASCII without NUL")
        if isinstance(self.initial_sequence, bool) or not isinstance(self.initial_sequence, int):
            raise ValueError("initial_sequence must be an int")
        if self.initial_sequence < 0 or self.initial_sequence > 0xFFFFFFFF:
            raise ValueError("initial_sequence must fit in u32")
        if not isinstance(self.reentrancy_guard, bool):
            raise ValueError("reentrancy_guard must be a bool")
        if not isinstance(self.check_invariants, bool):
            raise ValueError("check_invariants must be a bool")


ENV_PREFIX = "TOKENSWAP_"

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


def _parse_env_value(name: str, raw: str, default: Any) -> Any:
    s = raw.strip()
    if isinstance(default, bool):
        if s.lower() in _TRUE:
            return True
        if s.lower() in _FALSE:
            return False
        raise ValueError(f"{ENV_PREFIX}{name.upper()} must be a boolean, got {raw!r}")
    if isinstance(default, int):
        try:
            return int(s, 10)
        except ValueError as exc:
            raise ValueError(f"{ENV_PREFIX}{name.upper()} must be an int, got {raw!r}") from exc
    return s


def _read_yaml(path: Path) -> Dict[str, Any]:
    obj = yaml.safe_load(path.read_text(encoding="utf-8"))
    if obj is None:
        return {}
    if not isinstance(obj, Mapping):
        raise ValueError(f"config file must contain a mapping: {path}")
    section = obj.get("host", obj)
    if not isinstance(section, Mapping):
        raise ValueError(f"'host' section must be a mapping: {path}")
    return dict(section)


def load_config(
    path: Optional[Union[str, Path]] = None,
    env: Optional[Mapping[str, str]] = None,
) -> HostConfig:
    """
    Build a HostConfig from an optional YAML file and the environment.

    The YAML file may either be a flat mapping of HostConfig fields or nest
    them under a top-level `host:` key.
    """
    known = {f.name: f.default for f in fields(HostConfig)}
    values: Dict[str, Any] = {}

    if path is not None:
        for key, value in _read_yaml(Path(path)).items():
            if key not in known:
                raise ValueError(f"unknown config key: {key!r}")
            values[key] = value

    environ = os.environ if env is None else env
    for name, default in known.items():
        raw = environ.get(ENV_PREFIX + name.upper())
        if raw is not None:
            values[name] = _parse_env_value(name, raw, default)

    return replace(HostConfig(), **values)
