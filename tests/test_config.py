from __future__ import annotations

import re
from pathlib import Path

import pytest

from aiderkit.config import Configuration, select_paths
from aiderkit.errors import AiderKitError, ErrorKind
from aiderkit.settings import Settings
from aiderkit.store import coerce_scalar, load_config_file, parse_env_text


def test_defaults() -> None:
    config = Configuration()
    assert config.encoding == "utf-8"
    assert config.line_endings == "platform"
    assert config.suggest_shell_commands is True
    assert config.detect_urls is True
    assert config.voice_format == "wav"
    assert config.voice_language == "en"
    assert config.model is None
    assert not config.is_set("model")


def test_unset_is_distinct_from_false() -> None:
    config = Configuration(git=False)
    assert config.is_set("git")
    assert "git" in config.to_dict()
    assert "lint" not in config.to_dict()
    assert config.to_dict(include_unset=True)["lint"] is None


def test_set_rejects_unknown_option() -> None:
    config = Configuration().set("model", "gpt-4o")
    assert config.model == "gpt-4o"
    with pytest.raises(AiderKitError) as exc:
        config.set("no_such_option", 1)
    assert exc.value.kind == ErrorKind.VALIDATION


def test_apply_ignores_unknown_keys() -> None:
    config = Configuration().apply({"model": "gpt-4o", "bogus": True})
    assert config.model == "gpt-4o"


def test_from_mapping_caller_values_win_over_defaults() -> None:
    config = Configuration.from_mapping({"model": "mine"}, defaults={"model": "loaded", "pretty": True})
    assert config.model == "mine"
    assert config.pretty is True


def test_merged_leaves_receiver_untouched() -> None:
    base = Configuration(read_files=["a.md"])
    copy = base.merged({"git": True})
    copy.read_files.append("b.md")
    assert copy.git is True
    assert base.git is None
    assert base.read_files == ["a.md"]


def test_add_alias() -> None:
    config = Configuration().add_alias("fast", "gpt-4o-mini").add_alias("smart", "o1-preview")
    assert config.alias_settings == [
        {"alias": "fast", "model": "gpt-4o-mini"},
        {"alias": "smart", "model": "o1-preview"},
    ]


def test_add_conventions_files_validates_existence(tmp_path: Path) -> None:
    existing = tmp_path / "CONVENTIONS.md"
    existing.write_text("# rules\n", encoding="utf-8")
    config = Configuration().add_conventions_files(existing)
    assert config.conventions_files == [str(existing)]

    with pytest.raises(AiderKitError) as exc:
        config.add_conventions_files([tmp_path / "missing.md"])
    assert exc.value.kind == ErrorKind.FILE
    assert "missing.md" in exc.value.message


def test_add_read_files_without_validation_and_with_filters() -> None:
    config = Configuration().add_read_files(
        ["docs/a.md", "docs/b.txt", "build/c.md", "docs/tmp_d.md"],
        validate=False,
        extensions=[".md"],
        exclude=["build/", re.compile(r"tmp_")],
    )
    assert config.read_files == ["docs/a.md"]
    assert config.clear_read_files().read_files == []


def test_select_paths_without_filters() -> None:
    assert select_paths(["a", "b"]) == ["a", "b"]


def test_load_yaml_config(tmp_path: Path) -> None:
    path = tmp_path / ".aider.conf.yml"
    path.write_text("model: gpt-4o\nauto_commits: false\nread_files:\n  - a.md\n", encoding="utf-8")
    assert load_config_file(path) == {"model": "gpt-4o", "auto_commits": False, "read_files": ["a.md"]}


def test_load_json_config(tmp_path: Path) -> None:
    path = tmp_path / "aider.json"
    path.write_text('{"map_tokens": 2048}', encoding="utf-8")
    assert load_config_file(path) == {"map_tokens": 2048}


def test_load_env_config(tmp_path: Path) -> None:
    path = tmp_path / ".env"
    path.write_text("# comment\n\nAIDER_MODEL=gpt-4o\nVERBOSE=true\nMAP_TOKENS=1024\nbroken line\n", encoding="utf-8")
    assert load_config_file(path) == {"model": "gpt-4o", "verbose": True, "map_tokens": 1024}


def test_load_config_errors(tmp_path: Path) -> None:
    with pytest.raises(AiderKitError) as exc:
        load_config_file(tmp_path / "missing.yml")
    assert exc.value.kind == ErrorKind.CONFIGURATION

    bad_yaml = tmp_path / "bad.yaml"
    bad_yaml.write_text("model: [unclosed\n", encoding="utf-8")
    with pytest.raises(AiderKitError) as exc:
        load_config_file(bad_yaml)
    assert exc.value.kind == ErrorKind.CONFIGURATION

    bad_json = tmp_path / "bad.json"
    bad_json.write_text("{", encoding="utf-8")
    with pytest.raises(AiderKitError) as exc:
        load_config_file(bad_json)
    assert exc.value.kind == ErrorKind.CONFIGURATION

    unsupported = tmp_path / "aider.toml"
    unsupported.write_text("model = 'x'\n", encoding="utf-8")
    with pytest.raises(AiderKitError) as exc:
        load_config_file(unsupported)
    assert exc.value.kind == ErrorKind.CONFIGURATION

    not_mapping = tmp_path / "list.json"
    not_mapping.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(AiderKitError) as exc:
        load_config_file(not_mapping)
    assert exc.value.kind == ErrorKind.CONFIGURATION


def test_coerce_scalar() -> None:
    assert coerce_scalar("TRUE") is True
    assert coerce_scalar(" false ") is False
    assert coerce_scalar("42") == 42
    assert coerce_scalar("-3") == -3
    assert coerce_scalar("1k") == "1k"
    assert parse_env_text("A=b=c") == {"a": "b=c"}


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AIDERKIT_EXECUTABLE", "/opt/aider")
    monkeypatch.setenv("AIDERKIT_LEDGER_PATH", "/tmp/ledger.json")
    monkeypatch.setenv("AIDERKIT_LOG_LEVEL", "debug")
    monkeypatch.setenv("AIDERKIT_TIMEOUT_SECONDS", "30")
    settings = Settings.from_env()
    assert settings.executable == "/opt/aider"
    assert settings.ledger_path == Path("/tmp/ledger.json")
    assert settings.log_level == "DEBUG"
    assert settings.timeout_seconds == 30.0


def test_settings_reject_bad_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AIDERKIT_LOG_LEVEL", "loud")
    with pytest.raises(AiderKitError) as exc:
        Settings.from_env()
    assert exc.value.kind == ErrorKind.CONFIGURATION

    monkeypatch.setenv("AIDERKIT_LOG_LEVEL", "INFO")
    monkeypatch.setenv("AIDERKIT_TIMEOUT_SECONDS", "soon")
    with pytest.raises(AiderKitError) as exc:
        Settings.from_env()
    assert exc.value.kind == ErrorKind.CONFIGURATION
