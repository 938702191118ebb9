"""
Configuration for the streamschema runtime.

Defines ValidatorSettings, a frozen dataclass carrying the coercion and key
policies consumed by SchemaValidator and CastEngine. Defaults are sourced from
streamschema.core.constants (the single source of truth).

Precedence: environment > TOML > defaults.

Recognized keys
- truncate_float_to_int (bool): allow lossy float -> int coercion.
- coerce_string_keys (bool): parse numeric strings for Integer/Float primary keys.
- key_policy ("hash" | "sequence"): synthesized-key policy for unkeyed schemas.

Sources
- Environment: STREAMSCHEMA_TRUNCATE_FLOAT_TO_INT, STREAMSCHEMA_COERCE_STRING_KEYS,
  STREAMSCHEMA_KEY_POLICY.
- TOML: ./streamschema.toml ([validator] table or top-level keys), or
  ./pyproject.toml under [tool.streamschema.validator].

Notes
- Unlike loose config mappings elsewhere, malformed values raise ConfigError
  instead of being ignored: a silently wrong coercion policy changes data.
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from streamschema.core.constants import (
    CONFIG_FILENAME,
    DEFAULT_COERCE_STRING_KEYS,
    DEFAULT_KEY_POLICY,
    DEFAULT_TRUNCATE_FLOAT_TO_INT,
    ENV_PREFIX,
    KEY_POLICIES,
)
from streamschema.core.errors import ConfigError
from streamschema.core.registry import TypeRegistry

logger = logging.getLogger(__name__)

__all__ = ["ValidatorSettings"]

_TRUE = {"1", "true", "t", "yes", "y", "on"}
_FALSE = {"0", "false", "f", "no", "n", "off"}


def _bool(name: str, v: Any) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, int):
        return bool(v)
    if isinstance(v, str):
        lo = v.strip().lower()
        if lo in _TRUE:
            return True
        if lo in _FALSE:
            return False
    raise ConfigError(f"{name}: expected a boolean, got {v!r}")


@dataclass(frozen=True)
class ValidatorSettings:
    """
    Runtime settings for validators and cast engines.

    Attributes:
        truncate_float_to_int (bool): Allow lossy float -> int (default False).
        coerce_string_keys (bool): Parse numeric strings for primary keys (default False).
        key_policy (str): "hash" (content-derived Pointer) or "sequence" (monotonic int).

    Examples:
        >>> from streamschema.runtime.config import ValidatorSettings
        >>> ValidatorSettings(key_policy="sequence").registry()
        TypeRegistry(truncate_float_to_int=False, coerce_string_keys=False)
    """

    truncate_float_to_int: bool = DEFAULT_TRUNCATE_FLOAT_TO_INT
    coerce_string_keys: bool = DEFAULT_COERCE_STRING_KEYS
    key_policy: str = DEFAULT_KEY_POLICY

    def __post_init__(self) -> None:
        if self.key_policy not in KEY_POLICIES:
            raise ConfigError(
                f"key_policy must be one of {sorted(KEY_POLICIES)}, got {self.key_policy!r}"
            )

    def registry(self) -> TypeRegistry:
        """Build the TypeRegistry matching these coercion settings."""
        return TypeRegistry(
            truncate_float_to_int=self.truncate_float_to_int,
            coerce_string_keys=self.coerce_string_keys,
        )

    @classmethod
    def _apply_mapping(cls, base: ValidatorSettings, cfg: dict[str, Any] | None) -> ValidatorSettings:
        """Apply a config mapping onto settings, returning a new instance."""
        if not isinstance(cfg, dict):
            return base
        unknown = set(cfg) - {"truncate_float_to_int", "coerce_string_keys", "key_policy"}
        if unknown:
            raise ConfigError(f"unknown validator settings: {sorted(unknown)!r}")

        s = base
        if "truncate_float_to_int" in cfg:
            s = replace(s, truncate_float_to_int=_bool("truncate_float_to_int", cfg["truncate_float_to_int"]))
        if "coerce_string_keys" in cfg:
            s = replace(s, coerce_string_keys=_bool("coerce_string_keys", cfg["coerce_string_keys"]))
        if "key_policy" in cfg:
            policy = cfg["key_policy"]
            if not isinstance(policy, str):
                raise ConfigError(f"key_policy: expected a string, got {policy!r}")
            s = replace(s, key_policy=policy.strip().lower())
        return s

    @classmethod
    def from_env(cls, base: ValidatorSettings | None = None, prefix: str = ENV_PREFIX) -> ValidatorSettings:
        """
        Build settings from environment variables. Precedence is env > base (if provided) > defaults.

        Recognized variables:
            - STREAMSCHEMA_TRUNCATE_FLOAT_TO_INT (1/0/true/false/yes/no/on/off)
            - STREAMSCHEMA_COERCE_STRING_KEYS (1/0/true/false/yes/no/on/off)
            - STREAMSCHEMA_KEY_POLICY ("hash" | "sequence")
        """
        s = base or cls()
        mapping: dict[str, Any] = {}
        for key in ("truncate_float_to_int", "coerce_string_keys", "key_policy"):
            v = os.getenv(prefix + key.upper())
            if v:
                mapping[key] = v
        return cls._apply_mapping(s, mapping)

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str] | None = None) -> ValidatorSettings:
        """
        Build settings from a TOML file.

        Search order when `path` is None:
            1) ./streamschema.toml (with either a [validator] table or direct keys)
            2) ./pyproject.toml under [tool.streamschema.validator]

        Returns defaults if no file is present.

        Raises:
            ConfigError: If an explicit path is missing or any file is not valid TOML.
        """
        s = cls()
        cand: list[Path] = []
        if path is not None:
            p = Path(path)
            if not p.exists():
                raise ConfigError(f"config file not found: {p}")
            cand.append(p)
        else:
            cand.append(Path.cwd() / CONFIG_FILENAME)
            cand.append(Path.cwd() / "pyproject.toml")

        for p in cand:
            if not p.exists():
                continue
            try:
                with p.open("rb") as fh:
                    data = tomllib.load(fh)
            except tomllib.TOMLDecodeError as exc:
                raise ConfigError(f"invalid TOML in {p}: {exc}") from exc
            if p.name == "pyproject.toml":
                cfg = data.get("tool", {}).get("streamschema", {}).get("validator")
            elif isinstance(data.get("validator"), dict):
                cfg = data["validator"]
            else:
                cfg = data
            if cfg:
                logger.debug("loaded validator settings from %s", p)
                return cls._apply_mapping(s, cfg)
        return s

    @classmethod
    def load(cls, path: str | os.PathLike[str] | None = None) -> ValidatorSettings:
        """
        Load settings applying precedence: environment > TOML > defaults.

        Args:
            path: Optional explicit TOML path. If None, search defaults
                (streamschema.toml, pyproject.toml).
        """
        s = cls.from_toml(path)
        return cls.from_env(base=s)
