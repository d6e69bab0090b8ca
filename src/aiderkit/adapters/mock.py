from __future__ import annotations

from typing import Sequence

from .base import ProcessRunner, RunResult


class ScriptedRunner(ProcessRunner):
    """Replies keyed by the ``--message`` argument; records every argv it sees."""

    def __init__(
        self,
        replies: dict[str, RunResult | BaseException] | None = None,
        default: RunResult | None = None,
    ) -> None:
        self.replies = dict(replies or {})
        self.default = default
        self.calls: list[list[str]] = []
        self.spawned: list[list[str]] = []

    def run(self, argv: Sequence[str]) -> RunResult:
        args = list(argv)
        self.calls.append(args)
        message = _message_of(args)
        reply = self.replies.get(message) if message is not None else None
        if reply is None:
            reply = self.default or RunResult(stdout=f"ok: {message or ' '.join(args[1:])}")
        if isinstance(reply, BaseException):
            raise reply
        return reply

    def spawn(self, argv: Sequence[str]) -> dict[str, object]:
        args = list(argv)
        self.spawned.append(args)
        return {"argv": args, "pid": None}


def _message_of(args: list[str]) -> str | None:
    if "--message" in args:
        idx = args.index("--message")
        if idx + 1 < len(args):
            return args[idx + 1]
    return None
