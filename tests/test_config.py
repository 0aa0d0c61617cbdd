from pathlib import Path

import pytest
from pydantic import ValidationError

from hooker import Hooker, HookerConfig, load_config


def test_config_defaults() -> None:
    cfg = HookerConfig()

    assert cfg.max_priority == 20
    assert cfg.global_timeout_ms is None
    assert cfg.allow_unregistered_events is True
    assert not cfg.global_deadline_enabled


def test_config_precedence(tmp_path: Path) -> None:
    path = tmp_path / "hooker.yaml"
    path.write_text(
        """
hooker:
  max_priority: 10
  global_timeout_ms: 2000
  allow_unregistered_events: false
"""
    )

    cfg = load_config(path, overrides={"global_timeout_ms": 500})

    assert cfg.max_priority == 10
    assert cfg.global_timeout_ms == 500
    assert cfg.allow_unregistered_events is False
    assert cfg.global_deadline_enabled


def test_config_without_section(tmp_path: Path) -> None:
    path = tmp_path / "hooker.yaml"
    path.write_text("max_priority: 3\n")

    assert load_config(path).max_priority == 3


def test_missing_or_empty_file_uses_defaults(tmp_path: Path) -> None:
    empty = tmp_path / "empty.yaml"
    empty.write_text("")

    assert load_config(tmp_path / "absent.yaml") == HookerConfig()
    assert load_config(empty) == HookerConfig()
    assert load_config() == HookerConfig()


def test_non_mapping_yaml_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "hooker.yaml"
    path.write_text("- 1\n- 2\n")

    with pytest.raises(ValueError, match="mapping"):
        load_config(path)


def test_unknown_keys_are_rejected() -> None:
    with pytest.raises(ValidationError):
        load_config(overrides={"max_hooks": 3})
    with pytest.raises(ValidationError):
        Hooker({"max_priority": -1})


def test_registry_accepts_loaded_config(tmp_path: Path) -> None:
    path = tmp_path / "hooker.yaml"
    path.write_text("hooker:\n  allow_unregistered_events: false\n")
    outcomes: list = []

    hooker = Hooker(load_config(path), outcomes.append)
    hooker.register("start", lambda: None)
    hooker.invoke("stop")

    assert len(outcomes) == 1
