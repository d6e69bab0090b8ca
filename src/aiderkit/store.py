from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any

import yaml

from .errors import AiderKitError, ErrorKind
from .utils import ensure_parent

logger = logging.getLogger(__name__)

ENV_PREFIX = "AIDER_"

_INT = re.compile(r"\A-?\d+\Z")


def read_text_if_exists(path: Path) -> str | None:
    if not path.exists():
        return None
    return path.read_text(encoding="utf-8")


def write_text(path: Path, text: str) -> None:
    ensure_parent(path)
    path.write_text(text, encoding="utf-8")


def coerce_scalar(raw: str) -> Any:
    """Interpret ``true``/``false`` and decimal integers; anything else stays text."""
    value = raw.strip()
    lowered = value.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if _INT.match(value):
        return int(value)
    return value


def parse_assignment(line: str) -> tuple[str, Any] | None:
    if "=" not in line:
        return None
    key, value = line.split("=", 1)
    key = key.strip()
    if not key:
        return None
    return key, coerce_scalar(value)


def parse_env_text(text: str) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        parsed = parse_assignment(stripped)
        if parsed is None:
            logger.debug("skipping malformed env line: %s", stripped)
            continue
        key, value = parsed
        key = key.lower()
        if key.startswith(ENV_PREFIX.lower()):
            key = key[len(ENV_PREFIX):]
        out[key] = value
    return out


def load_config_file(path: Path) -> dict[str, Any]:
    """Read tool options from a YAML, JSON or ``KEY=value`` file."""
    if not path.exists():
        raise AiderKitError(ErrorKind.CONFIGURATION, f"configuration file not found: {path}")

    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    try:
        if suffix in {".yml", ".yaml"}:
            data = yaml.safe_load(text)
        elif suffix == ".json":
            data = json.loads(text)
        elif suffix == ".env" or path.name.startswith(".env"):
            data = parse_env_text(text)
        else:
            raise AiderKitError(ErrorKind.CONFIGURATION, f"unsupported config file format: {suffix or path.name}")
    except yaml.YAMLError as exc:
        raise AiderKitError(ErrorKind.CONFIGURATION, f"invalid YAML in {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise AiderKitError(ErrorKind.CONFIGURATION, f"invalid JSON in {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise AiderKitError(ErrorKind.CONFIGURATION, f"configuration in {path} must be a mapping")
    logger.debug("loaded %d options from %s", len(data), path)
    return data
