from __future__ import annotations

PROGRAM_NAME = "aider"

DEFAULT_TEST_CMD = "pytest"
DEFAULT_DOC_MODEL = "claude-3-5-sonnet-20241022"
DEFAULT_LEDGER_PATH = ".aiderkit/tasks.json"

COMPOSITE_SEPARATOR = ":"

CONFIG_DEFAULTS = {
    "encoding": "utf-8",
    "line_endings": "platform",
    "suggest_shell_commands": True,
    "fancy_input": True,
    "detect_urls": True,
    "voice_format": "wav",
    "voice_language": "en",
}

VALID_EDIT_FORMATS = ("whole", "diff", "diff-fenced")
VALID_REASONING_EFFORTS = ("low", "medium", "high")
VALID_VOICE_FORMATS = ("wav", "webm", "mp3")
VALID_LINE_ENDINGS = ("platform", "lf", "crlf", "cr")
VALID_ENCODINGS = ("utf-8", "utf-16", "utf-32", "ascii")

TIMEOUT_RANGE = (1, 3600)
MAP_TOKENS_RANGE = (1, 100_000)
MIN_API_KEY_LENGTH = 10

# Extra configuration applied by each task category before caller overrides.
TASK_PRESETS: dict[str, dict[str, object]] = {
    "coding": {},
    "refactoring": {"git": True, "auto_commits": True, "lint": True, "auto_lint": True},
    "debugging": {"verbose": True, "test": True, "auto_test": True, "show_diffs": True},
    "documentation": {"model": DEFAULT_DOC_MODEL, "pretty": True},
    "test_generation": {"test": True, "auto_test": True, "test_cmd": DEFAULT_TEST_CMD},
    "multi_step": {},
}

LEDGER_RECORD_KEYS = (
    "id",
    "type",
    "description",
    "files",
    "status",
    "steps",
    "result",
    "error",
    "created_at",
    "completed_at",
    "failed_at",
)
