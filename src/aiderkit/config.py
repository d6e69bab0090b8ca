from __future__ import annotations

import logging
import re
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Iterable, Mapping

from .constants import CONFIG_DEFAULTS
from .errors import AiderKitError, ErrorKind

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Configuration:
    # model
    model: str | None = None
    openai_api_key: str | None = None
    anthropic_api_key: str | None = None
    openai_api_base: str | None = None
    openai_api_type: str | None = None
    openai_api_version: str | None = None
    openai_api_deployment_id: str | None = None
    openai_organization_id: str | None = None
    reasoning_effort: str | None = None
    thinking_tokens: str | int | None = None
    verify_ssl: bool | None = None
    timeout: int | None = None
    edit_format: str | None = None
    architect: bool | None = None
    auto_accept_architect: bool | None = None
    weak_model: str | None = None
    editor_model: str | None = None
    editor_edit_format: str | None = None
    show_model_warnings: bool | None = None
    check_model_accepts_settings: bool | None = None
    max_chat_history_tokens: int | None = None
    use_temperature: bool | None = None
    use_system_prompt: bool | None = None
    use_repo_map: bool | None = None
    extra_params: dict[str, Any] | None = None
    model_settings_file: str | None = None
    model_metadata_file: str | None = None
    alias_settings: list[Any] | None = None
    reasoning_tag: str | None = None
    weak_model_name: str | None = None
    editor_model_name: str | None = None

    # cache
    cache_prompts: bool | None = None
    cache_keepalive_pings: int | None = None

    # repo map
    map_tokens: int | None = None
    map_refresh: str | None = None
    map_multiplier_no_files: int | float | None = None

    # history
    input_history_file: str | None = None
    chat_history_file: str | None = None
    restore_chat_history: bool | None = None
    llm_history_file: str | None = None

    # output
    dark_mode: bool | None = None
    light_mode: bool | None = None
    pretty: bool | None = None
    stream: bool | None = None
    user_input_color: str | None = None
    tool_output_color: str | None = None
    tool_error_color: str | None = None
    tool_warning_color: str | None = None
    assistant_output_color: str | None = None
    completion_menu_color: str | None = None
    completion_menu_bg_color: str | None = None
    completion_menu_current_color: str | None = None
    completion_menu_current_bg_color: str | None = None
    code_theme: str | None = None
    show_diffs: bool | None = None

    # git
    git: bool | None = None
    gitignore: bool | None = None
    add_gitignore_files: bool | None = None
    aiderignore: str | None = None
    subtree_only: bool | None = None
    auto_commits: bool | None = None
    dirty_commits: bool | None = None
    attribute_author: bool | None = None
    attribute_committer: bool | None = None
    attribute_commit_message_author: bool | None = None
    attribute_commit_message_committer: bool | None = None
    attribute_co_authored_by: bool | None = None
    git_commit_verify: bool | None = None
    commit: bool | None = None
    commit_prompt: str | None = None
    dry_run: bool | None = None
    skip_sanity_check_repo: bool | None = None
    watch_files: bool | None = None

    # lint / test
    lint: bool | None = None
    lint_cmd: str | None = None
    auto_lint: bool | None = None
    test_cmd: str | None = None
    auto_test: bool | None = None
    test: bool | None = None

    # analytics
    analytics: bool | None = None
    analytics_log: str | None = None
    analytics_disable: bool | None = None
    analytics_posthog_host: str | None = None
    analytics_posthog_project_api_key: str | None = None

    # voice
    voice_format: str | None = CONFIG_DEFAULTS["voice_format"]
    voice_language: str | None = CONFIG_DEFAULTS["voice_language"]
    voice_input_device: str | None = None

    # general
    disable_playwright: bool | None = None
    vim: bool | None = None
    chat_language: str | None = None
    commit_language: str | None = None
    yes_always: bool | None = None
    verbose: bool | None = None
    encoding: str | None = CONFIG_DEFAULTS["encoding"]
    line_endings: str | None = CONFIG_DEFAULTS["line_endings"]
    suggest_shell_commands: bool | None = CONFIG_DEFAULTS["suggest_shell_commands"]
    fancy_input: bool | None = CONFIG_DEFAULTS["fancy_input"]
    multiline: bool | None = None
    notifications: bool | None = None
    notifications_command: str | None = None
    detect_urls: bool | None = CONFIG_DEFAULTS["detect_urls"]
    editor: str | None = None
    shell_completions: bool | None = None

    # conventions
    conventions_files: list[str] | None = None
    read_files: list[str] | None = None
    edit_format_whole: bool | None = None
    edit_format_diff: bool | None = None
    edit_format_diff_fenced: bool | None = None
    editor_edit_format_whole: bool | None = None
    editor_edit_format_diff: bool | None = None
    editor_edit_format_diff_fenced: bool | None = None

    @classmethod
    def field_names(cls) -> frozenset[str]:
        return frozenset(f.name for f in fields(cls))

    @classmethod
    def from_mapping(
        cls,
        values: Mapping[str, Any] | None = None,
        defaults: Mapping[str, Any] | None = None,
    ) -> Configuration:
        """Build a record from loaded defaults overlaid with caller values."""
        config = cls()
        if defaults:
            config.apply(defaults)
        if values:
            config.apply(values)
        return config

    def set(self, name: str, value: Any) -> Configuration:
        if name not in self.field_names():
            raise AiderKitError(ErrorKind.VALIDATION, f"unknown configuration option: {name}")
        setattr(self, name, value)
        return self

    def apply(self, values: Mapping[str, Any]) -> Configuration:
        known = self.field_names()
        for key, value in values.items():
            if key in known:
                setattr(self, key, value)
            else:
                logger.debug("ignoring unknown configuration option %s", key)
        return self

    def merged(self, overrides: Mapping[str, Any] | None = None) -> Configuration:
        """Return a copy with ``overrides`` applied; the receiver is left untouched."""
        copy = replace(self)
        for name in ("alias_settings", "conventions_files", "read_files"):
            current = getattr(copy, name)
            if current is not None:
                setattr(copy, name, list(current))
        if overrides:
            copy.apply(overrides)
        return copy

    def is_set(self, name: str) -> bool:
        return getattr(self, name, None) is not None

    def to_dict(self, include_unset: bool = False) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for name in sorted(self.field_names()):
            value = getattr(self, name)
            if value is None and not include_unset:
                continue
            out[name] = value
        return out

    def add_alias(self, alias: str, model: str) -> Configuration:
        if self.alias_settings is None:
            self.alias_settings = []
        self.alias_settings.append({"alias": alias, "model": model})
        return self

    def add_conventions_files(self, paths: str | Path | Iterable[str | Path], validate: bool = True) -> Configuration:
        selected = [str(path) for path in _as_list(paths)]
        if validate:
            _require_existing(selected, "conventions file not found")
        if self.conventions_files is None:
            self.conventions_files = []
        self.conventions_files.extend(selected)
        return self

    def add_read_files(
        self,
        paths: str | Path | Iterable[str | Path],
        validate: bool = True,
        extensions: Iterable[str] | None = None,
        exclude: Iterable[str | re.Pattern[str]] = (),
    ) -> Configuration:
        selected = select_paths(_as_list(paths), extensions=extensions, exclude=exclude)
        if validate:
            _require_existing(selected, "read file not found")
        if self.read_files is None:
            self.read_files = []
        self.read_files.extend(selected)
        return self

    def clear_read_files(self) -> Configuration:
        self.read_files = []
        return self


def select_paths(
    paths: Iterable[str | Path],
    extensions: Iterable[str] | None = None,
    exclude: Iterable[str | re.Pattern[str]] = (),
) -> list[str]:
    """Keep paths whose suffix is allowed and that match no exclude pattern.

    A string pattern excludes by substring, a compiled pattern by ``search``.
    """
    allowed = set(extensions) if extensions is not None else None
    patterns = list(exclude)
    out: list[str] = []
    for path in paths:
        text = str(path)
        if allowed is not None and Path(text).suffix not in allowed:
            continue
        if any(_matches(text, pattern) for pattern in patterns):
            continue
        out.append(text)
    return out


def _matches(text: str, pattern: str | re.Pattern[str]) -> bool:
    if isinstance(pattern, str):
        return pattern in text
    return pattern.search(text) is not None


def _as_list(paths: str | Path | Iterable[str | Path]) -> list[str | Path]:
    if isinstance(paths, (str, Path)):
        return [paths]
    return list(paths)


def _require_existing(paths: list[str], message: str) -> None:
    for path in paths:
        if not Path(path).exists():
            raise AiderKitError(ErrorKind.FILE, f"{message}: {path}")
