from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .constants import COMPOSITE_SEPARATOR


class EmissionKind(str, Enum):
    PRESENCE = "presence"
    VALUED = "valued"
    REPEATED_VALUED = "repeated-valued"
    REPEATED_COMPOSITE = "repeated-composite"
    CONSTANT = "constant"


class Category(str, Enum):
    MODEL = "model"
    CACHE = "cache"
    REPO_MAP = "repo_map"
    HISTORY = "history"
    OUTPUT = "output"
    GIT = "git"
    LINT_TEST = "lint_test"
    ANALYTICS = "analytics"
    VOICE = "voice"
    GENERAL = "general"
    CONVENTIONS = "conventions"


CATEGORY_ORDER: tuple[Category, ...] = tuple(Category)


@dataclass(frozen=True, slots=True)
class FieldSpec:
    name: str
    flag: str
    kind: EmissionKind
    category: Category
    value: str | None = None
    parts: tuple[str, str] | None = None
    separator: str = COMPOSITE_SEPARATOR


def _presence(name: str, category: Category) -> FieldSpec:
    return FieldSpec(name, "--" + name.replace("_", "-"), EmissionKind.PRESENCE, category)


def _valued(name: str, category: Category) -> FieldSpec:
    return FieldSpec(name, "--" + name.replace("_", "-"), EmissionKind.VALUED, category)


def _constant(name: str, flag: str, value: str) -> FieldSpec:
    return FieldSpec(name, flag, EmissionKind.CONSTANT, Category.CONVENTIONS, value=value)


_M = Category.MODEL
_O = Category.OUTPUT
_G = Category.GIT
_L = Category.LINT_TEST
_A = Category.ANALYTICS
_GEN = Category.GENERAL

REGISTRY: tuple[FieldSpec, ...] = (
    # model
    _valued("model", _M),
    _valued("openai_api_key", _M),
    _valued("anthropic_api_key", _M),
    _valued("openai_api_base", _M),
    _valued("openai_api_type", _M),
    _valued("openai_api_version", _M),
    _valued("openai_api_deployment_id", _M),
    _valued("openai_organization_id", _M),
    _valued("reasoning_effort", _M),
    _valued("thinking_tokens", _M),
    _presence("verify_ssl", _M),
    _valued("timeout", _M),
    _valued("edit_format", _M),
    _presence("architect", _M),
    _presence("auto_accept_architect", _M),
    _valued("weak_model", _M),
    _valued("editor_model", _M),
    _valued("editor_edit_format", _M),
    _presence("show_model_warnings", _M),
    _presence("check_model_accepts_settings", _M),
    _valued("max_chat_history_tokens", _M),
    _valued("model_settings_file", _M),
    _valued("model_metadata_file", _M),
    FieldSpec(
        "alias_settings",
        "--alias",
        EmissionKind.REPEATED_COMPOSITE,
        _M,
        parts=("alias", "model"),
    ),
    # cache
    _presence("cache_prompts", Category.CACHE),
    _valued("cache_keepalive_pings", Category.CACHE),
    # repo map
    _valued("map_tokens", Category.REPO_MAP),
    _valued("map_refresh", Category.REPO_MAP),
    _valued("map_multiplier_no_files", Category.REPO_MAP),
    # history
    _valued("input_history_file", Category.HISTORY),
    _valued("chat_history_file", Category.HISTORY),
    _presence("restore_chat_history", Category.HISTORY),
    _valued("llm_history_file", Category.HISTORY),
    # output
    _presence("dark_mode", _O),
    _presence("light_mode", _O),
    _presence("pretty", _O),
    _presence("stream", _O),
    _valued("user_input_color", _O),
    _valued("tool_output_color", _O),
    _valued("tool_error_color", _O),
    _valued("tool_warning_color", _O),
    _valued("assistant_output_color", _O),
    _valued("completion_menu_color", _O),
    _valued("completion_menu_bg_color", _O),
    _valued("completion_menu_current_color", _O),
    _valued("completion_menu_current_bg_color", _O),
    _valued("code_theme", _O),
    _presence("show_diffs", _O),
    # git
    _presence("git", _G),
    _presence("gitignore", _G),
    _presence("add_gitignore_files", _G),
    _valued("aiderignore", _G),
    _presence("subtree_only", _G),
    _presence("auto_commits", _G),
    _presence("dirty_commits", _G),
    _presence("attribute_author", _G),
    _presence("attribute_committer", _G),
    _presence("attribute_commit_message_author", _G),
    _presence("attribute_commit_message_committer", _G),
    _presence("attribute_co_authored_by", _G),
    _presence("git_commit_verify", _G),
    _presence("commit", _G),
    _valued("commit_prompt", _G),
    _presence("dry_run", _G),
    _presence("skip_sanity_check_repo", _G),
    _presence("watch_files", _G),
    # lint / test
    _presence("lint", _L),
    _valued("lint_cmd", _L),
    _presence("auto_lint", _L),
    _valued("test_cmd", _L),
    _presence("auto_test", _L),
    _presence("test", _L),
    # analytics
    _presence("analytics", _A),
    _valued("analytics_log", _A),
    _presence("analytics_disable", _A),
    _valued("analytics_posthog_host", _A),
    _valued("analytics_posthog_project_api_key", _A),
    # voice
    _valued("voice_format", Category.VOICE),
    _valued("voice_language", Category.VOICE),
    _valued("voice_input_device", Category.VOICE),
    # general
    _presence("disable_playwright", _GEN),
    _presence("vim", _GEN),
    _valued("chat_language", _GEN),
    _valued("commit_language", _GEN),
    _presence("yes_always", _GEN),
    _presence("verbose", _GEN),
    _valued("encoding", _GEN),
    _valued("line_endings", _GEN),
    _presence("suggest_shell_commands", _GEN),
    _presence("fancy_input", _GEN),
    _presence("multiline", _GEN),
    _presence("notifications", _GEN),
    _valued("notifications_command", _GEN),
    _presence("detect_urls", _GEN),
    _valued("editor", _GEN),
    # conventions
    FieldSpec("conventions_files", "--read", EmissionKind.REPEATED_VALUED, Category.CONVENTIONS),
    FieldSpec("read_files", "--read", EmissionKind.REPEATED_VALUED, Category.CONVENTIONS),
    _constant("edit_format_whole", "--edit-format", "whole"),
    _constant("edit_format_diff", "--edit-format", "diff"),
    _constant("edit_format_diff_fenced", "--edit-format", "diff-fenced"),
    _constant("editor_edit_format_whole", "--editor-edit-format", "whole"),
    _constant("editor_edit_format_diff", "--editor-edit-format", "diff"),
    _constant("editor_edit_format_diff_fenced", "--editor-edit-format", "diff-fenced"),
)

# Configuration fields that exist for bookkeeping and never reach the command line.
EXCLUDED_FIELDS = frozenset(
    {
        "use_temperature",
        "use_system_prompt",
        "use_repo_map",
        "extra_params",
        "reasoning_tag",
        "weak_model_name",
        "editor_model_name",
        "shell_completions",
    }
)


def ordered_entries(registry: tuple[FieldSpec, ...] = REGISTRY) -> list[FieldSpec]:
    """Entries grouped by category order, registry order kept within a category."""
    rank = {category: idx for idx, category in enumerate(CATEGORY_ORDER)}
    return sorted(registry, key=lambda spec: rank[spec.category])


def entries_for(category: Category, registry: tuple[FieldSpec, ...] = REGISTRY) -> list[FieldSpec]:
    return [spec for spec in registry if spec.category == category]


def lookup(name: str, registry: tuple[FieldSpec, ...] = REGISTRY) -> FieldSpec | None:
    for spec in registry:
        if spec.name == name:
            return spec
    return None
