from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Iterable

from .config import Configuration
from .constants import PROGRAM_NAME
from .errors import AiderKitError, ErrorKind
from .fields import REGISTRY, EmissionKind, FieldSpec, ordered_entries

# Per-call options that are not configuration fields.
INVOCATION_FLAGS = {
    "config_file": "--config",
    "env_file": "--env-file",
}


def compile_args(
    config: Configuration,
    files: Iterable[str | Path] = (),
    read_only_files: Iterable[str | Path] = (),
    registry: tuple[FieldSpec, ...] = REGISTRY,
    program: str = PROGRAM_NAME,
) -> list[str]:
    args = [program]
    for spec in ordered_entries(registry):
        args.extend(_emit(spec, getattr(config, spec.name, None)))
    for path in files:
        args.extend(["--file", str(path)])
    for path in read_only_files:
        args.extend(["--read", str(path)])
    return args


def invocation_args(options: Mapping[str, Any] | None) -> list[str]:
    args: list[str] = []
    if not options:
        return args
    for key, flag in INVOCATION_FLAGS.items():
        value = options.get(key)
        if value:
            args.extend([flag, str(value)])
    return args


def _emit(spec: FieldSpec, value: Any) -> list[str]:
    if value is None or value is False:
        return []

    if spec.kind == EmissionKind.PRESENCE:
        return [spec.flag] if value else []

    if spec.kind == EmissionKind.CONSTANT:
        return [spec.flag, str(spec.value)] if value else []

    if spec.kind == EmissionKind.VALUED:
        text = _stringify(spec, value)
        return [spec.flag, text] if text else []

    out: list[str] = []
    for item in _elements(value):
        if spec.kind == EmissionKind.REPEATED_COMPOSITE:
            out.extend([spec.flag, _compose(spec, item)])
        else:
            out.extend([spec.flag, _stringify(spec, item)])
    return out


def _elements(value: Any) -> list[Any]:
    if isinstance(value, (str, Path, Mapping)):
        return [value]
    return list(value)


def _stringify(spec: FieldSpec, value: Any) -> str:
    if isinstance(value, bool):
        raise AiderKitError(ErrorKind.VALIDATION, f"{spec.name} expects a value, got a boolean")
    return str(value)


def _compose(spec: FieldSpec, item: Any) -> str:
    if isinstance(item, Mapping):
        if spec.parts is None:
            raise AiderKitError(ErrorKind.VALIDATION, f"{spec.name} does not accept mappings")
        try:
            first, second = (item[key] for key in spec.parts)
        except KeyError as exc:
            raise AiderKitError(ErrorKind.VALIDATION, f"{spec.name} entry missing key {exc}") from exc
    elif isinstance(item, Sequence) and not isinstance(item, str) and len(item) == 2:
        first, second = item
    else:
        raise AiderKitError(ErrorKind.VALIDATION, f"{spec.name} entries must be pairs, got {item!r}")
    return f"{_stringify(spec, first)}{spec.separator}{_stringify(spec, second)}"
