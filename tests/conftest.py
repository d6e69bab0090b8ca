from __future__ import annotations

import pytest

from aiderkit.adapters.mock import ScriptedRunner
from aiderkit.client import AiderClient
from aiderkit.config import Configuration
from aiderkit.executor import TaskExecutor
from aiderkit.ledger import TaskLedger


@pytest.fixture
def runner() -> ScriptedRunner:
    return ScriptedRunner()


@pytest.fixture
def client(runner: ScriptedRunner) -> AiderClient:
    return AiderClient(Configuration(), runner=runner)


@pytest.fixture
def ledger() -> TaskLedger:
    return TaskLedger()


@pytest.fixture
def executor(client: AiderClient, ledger: TaskLedger) -> TaskExecutor:
    return TaskExecutor(client, ledger)
