from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .constants import DEFAULT_LEDGER_PATH, PROGRAM_NAME
from .errors import AiderKitError, ErrorKind

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(slots=True)
class Settings:
    executable: str = PROGRAM_NAME
    ledger_path: Path = Path(DEFAULT_LEDGER_PATH)
    log_level: str = "WARNING"
    timeout_seconds: float | None = None

    @classmethod
    def from_env(cls) -> Settings:
        log_level = os.getenv("AIDERKIT_LOG_LEVEL", "WARNING").upper()
        if log_level not in LOG_LEVELS:
            raise AiderKitError(ErrorKind.CONFIGURATION, f"invalid AIDERKIT_LOG_LEVEL: {log_level}")

        raw_timeout = os.getenv("AIDERKIT_TIMEOUT_SECONDS", "").strip()
        timeout_seconds: float | None = None
        if raw_timeout:
            try:
                timeout_seconds = float(raw_timeout)
            except ValueError as exc:
                raise AiderKitError(
                    ErrorKind.CONFIGURATION,
                    f"invalid AIDERKIT_TIMEOUT_SECONDS: {raw_timeout}",
                ) from exc

        return cls(
            executable=os.getenv("AIDERKIT_EXECUTABLE", PROGRAM_NAME),
            ledger_path=Path(os.getenv("AIDERKIT_LEDGER_PATH", DEFAULT_LEDGER_PATH)),
            log_level=log_level,
            timeout_seconds=timeout_seconds,
        )

    def configure_logging(self, level: str | None = None) -> None:
        logging.basicConfig(
            level=(level or self.log_level).upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
