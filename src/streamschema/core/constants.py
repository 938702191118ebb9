"""
Defaults shared by the core and runtime layers.

This module is zero-IO and uses only the Python standard library. Runtime
settings (streamschema.runtime.config) read their defaults from here.
"""

from __future__ import annotations

__all__ = [
    "KEY_POLICY_HASH",
    "KEY_POLICY_SEQUENCE",
    "KEY_POLICIES",
    "DEFAULT_KEY_POLICY",
    "DEFAULT_TRUNCATE_FLOAT_TO_INT",
    "DEFAULT_COERCE_STRING_KEYS",
    "ENV_PREFIX",
    "CONFIG_FILENAME",
]

# Synthesized-key policies for schemas without primary-key columns.
KEY_POLICY_HASH: str = "hash"
KEY_POLICY_SEQUENCE: str = "sequence"
KEY_POLICIES: frozenset[str] = frozenset({KEY_POLICY_HASH, KEY_POLICY_SEQUENCE})
DEFAULT_KEY_POLICY: str = KEY_POLICY_HASH

# Coercion policy defaults: reject lossy float -> int and string primary keys.
DEFAULT_TRUNCATE_FLOAT_TO_INT: bool = False
DEFAULT_COERCE_STRING_KEYS: bool = False

# Configuration sources.
ENV_PREFIX: str = "STREAMSCHEMA_"
CONFIG_FILENAME: str = "streamschema.toml"
