from __future__ import annotations

from pathlib import Path

import pytest

from streamschema.core.errors import ConfigError
from streamschema.runtime.config import ValidatorSettings

_ENV_KEYS = [
    "STREAMSCHEMA_TRUNCATE_FLOAT_TO_INT",
    "STREAMSCHEMA_COERCE_STRING_KEYS",
    "STREAMSCHEMA_KEY_POLICY",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults_when_no_config(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    s = ValidatorSettings.load()
    assert s == ValidatorSettings()
    assert s.truncate_float_to_int is False
    assert s.coerce_string_keys is False
    assert s.key_policy == "hash"


def test_toml_validator_table(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "streamschema.toml").write_text(
        """
        [validator]
        truncate_float_to_int = true
        key_policy = "sequence"
        """.strip()
    )
    monkeypatch.chdir(tmp_path)
    s = ValidatorSettings.load()
    assert s.truncate_float_to_int is True
    assert s.key_policy == "sequence"
    assert s.coerce_string_keys is False


def test_pyproject_tool_table(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "pyproject.toml").write_text(
        """
        [tool.streamschema.validator]
        coerce_string_keys = true
        """.strip()
    )
    monkeypatch.chdir(tmp_path)
    assert ValidatorSettings.load().coerce_string_keys is True


def test_env_overrides_toml(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "streamschema.toml").write_text('key_policy = "sequence"\ntruncate_float_to_int = true\n')
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("STREAMSCHEMA_KEY_POLICY", "hash")
    monkeypatch.setenv("STREAMSCHEMA_TRUNCATE_FLOAT_TO_INT", "off")
    s = ValidatorSettings.load()
    assert s.key_policy == "hash"
    assert s.truncate_float_to_int is False


def test_explicit_path(tmp_path: Path) -> None:
    cfg = tmp_path / "custom.toml"
    cfg.write_text("coerce_string_keys = 1\n")
    assert ValidatorSettings.from_toml(cfg).coerce_string_keys is True
    with pytest.raises(ConfigError):
        ValidatorSettings.from_toml(tmp_path / "missing.toml")


@pytest.mark.parametrize(
    "content",
    [
        'key_policy = "random"\n',
        'truncate_float_to_int = "maybe"\n',
        "unknown_option = true\n",
        "not valid toml [\n",
    ],
)
def test_invalid_config_raises(tmp_path: Path, content: str) -> None:
    cfg = tmp_path / "bad.toml"
    cfg.write_text(content)
    with pytest.raises(ConfigError):
        ValidatorSettings.from_toml(cfg)


def test_invalid_env_raises(monkeypatch) -> None:
    monkeypatch.setenv("STREAMSCHEMA_COERCE_STRING_KEYS", "perhaps")
    with pytest.raises(ConfigError):
        ValidatorSettings.from_env()


def test_registry_reflects_settings() -> None:
    reg = ValidatorSettings(truncate_float_to_int=True, coerce_string_keys=True).registry()
    assert reg.truncate_float_to_int and reg.coerce_string_keys
