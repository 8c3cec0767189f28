"""Runtime configuration for signed functions.

Configuration is optional: without a file every signed function checks its
arguments and its result.  A YAML document can switch checking off (for
example in a hot production path) or change how heterogeneous arrays are
treated::

    enabled: true
    check_results: true
    heterogeneous_arrays: collapse   # or "raise"
    emit_hooks: true
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping

import yaml

__all__ = [
    "CONFIG_ENV",
    "HETEROGENEOUS_POLICIES",
    "SignetConfig",
    "default_config",
    "load_config",
]

CONFIG_ENV = "SIGNET_CONFIG"
HETEROGENEOUS_POLICIES = frozenset({"collapse", "raise"})


def load_config(path: str | Path) -> Any:
    """Return the parsed YAML document located at ``path``.

    A missing file raises :class:`FileNotFoundError`; a document whose root is
    not a mapping raises :class:`ValueError`.  An empty document yields ``{}``.
    """

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"configuration file not found: {config_path}")
    raw_text = config_path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(raw_text)
    except yaml.YAMLError as exc:
        raise ValueError(f"failed to parse configuration: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("configuration root must be a mapping")
    return data


@dataclass(slots=True, frozen=True)
class SignetConfig:
    """Switches consulted by :func:`signet.verifier.signer.sign`."""

    enabled: bool = True
    check_results: bool = True
    heterogeneous_arrays: str = "collapse"
    emit_hooks: bool = True

    def __post_init__(self) -> None:
        for name in ("enabled", "check_results", "emit_hooks"):
            if not isinstance(getattr(self, name), bool):
                raise ValueError(f"{name} must be a boolean")
        if self.heterogeneous_arrays not in HETEROGENEOUS_POLICIES:
            allowed = ", ".join(sorted(HETEROGENEOUS_POLICIES))
            raise ValueError(
                f"heterogeneous_arrays must be one of {allowed}, got {self.heterogeneous_arrays!r}"
            )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SignetConfig":
        known = {item.name for item in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"unknown configuration keys: {', '.join(unknown)}")
        return cls(**dict(data))

    @classmethod
    def from_file(cls, path: str | Path) -> "SignetConfig":
        return cls.from_mapping(load_config(path))


def default_config() -> SignetConfig:
    """Return the configuration named by ``$SIGNET_CONFIG`` or the defaults."""

    path = os.environ.get(CONFIG_ENV)
    if path:
        return SignetConfig.from_file(path)
    return SignetConfig()
