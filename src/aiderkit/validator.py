from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Iterable

from . import models
from .config import Configuration
from .constants import (
    MAP_TOKENS_RANGE,
    MIN_API_KEY_LENGTH,
    TIMEOUT_RANGE,
    VALID_EDIT_FORMATS,
    VALID_ENCODINGS,
    VALID_LINE_ENDINGS,
    VALID_REASONING_EFFORTS,
    VALID_VOICE_FORMATS,
)
from .errors import AiderKitError, ErrorKind

_THINKING_TOKENS = re.compile(r"\A\d+[km]?\Z")


def _blank(value: Any) -> bool:
    return value is None or value == ""


def validate_choice(label: str, value: Any, choices: Iterable[str]) -> None:
    if _blank(value):
        return
    allowed = tuple(choices)
    if str(value) not in allowed:
        raise AiderKitError(
            ErrorKind.VALIDATION,
            f"invalid {label}: {value}. valid values: {', '.join(allowed)}",
        )


def validate_range(label: str, value: Any, bounds: tuple[int, int]) -> None:
    if _blank(value):
        return
    low, high = bounds
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise AiderKitError(ErrorKind.VALIDATION, f"invalid {label}: {value!r} is not an integer") from exc
    if number < low or number > high:
        raise AiderKitError(ErrorKind.VALIDATION, f"invalid {label}: {value}. must be between {low} and {high}")


def validate_thinking_tokens(value: Any) -> None:
    if _blank(value):
        return
    if not _THINKING_TOKENS.match(str(value).lower()):
        raise AiderKitError(
            ErrorKind.VALIDATION,
            f"invalid thinking tokens: {value}. use formats like '1k', '8k', '1000'",
        )


def validate_api_key(value: Any, provider: str) -> None:
    if _blank(value):
        return
    if len(str(value)) < MIN_API_KEY_LENGTH:
        raise AiderKitError(ErrorKind.VALIDATION, f"invalid {provider} API key: too short")


def validate_model_name(value: Any) -> None:
    if _blank(value):
        return
    if not models.supported_model(str(value)):
        raise AiderKitError(ErrorKind.VALIDATION, f"unsupported model: {value}")


def validate_file_path(value: Any) -> None:
    if _blank(value):
        return
    if not Path(str(value)).exists():
        raise AiderKitError(ErrorKind.FILE, f"file not found: {value}")


def validate_config(config: Configuration, check_files: bool = False, check_model: bool = False) -> None:
    """Check enumerated and ranged options; raise on the first violation."""
    validate_choice("edit format", config.edit_format, VALID_EDIT_FORMATS)
    validate_choice("editor edit format", config.editor_edit_format, VALID_EDIT_FORMATS)
    validate_choice("reasoning effort", config.reasoning_effort, VALID_REASONING_EFFORTS)
    validate_thinking_tokens(config.thinking_tokens)
    validate_choice("voice format", config.voice_format, VALID_VOICE_FORMATS)
    validate_choice("line endings", config.line_endings, VALID_LINE_ENDINGS)
    validate_choice("encoding", config.encoding, VALID_ENCODINGS)
    validate_range("timeout", config.timeout, TIMEOUT_RANGE)
    validate_range("map tokens", config.map_tokens, MAP_TOKENS_RANGE)
    validate_api_key(config.openai_api_key, "OpenAI")
    validate_api_key(config.anthropic_api_key, "Anthropic")

    if check_model:
        validate_model_name(config.model)

    if check_files:
        for path in (
            config.model_settings_file,
            config.model_metadata_file,
            config.aiderignore,
        ):
            validate_file_path(path)
        for path in list(config.conventions_files or []) + list(config.read_files or []):
            validate_file_path(path)
