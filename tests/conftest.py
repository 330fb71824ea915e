from pathlib import Path
from typing import Any, Callable, Generator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from coreason_runbox.config import RunboxConfig
from coreason_runbox.exceptions import TeardownError
from coreason_runbox.models import ProcessResult, RunContext
from coreason_runbox.runtime import ContainerRuntime


class FakeRuntime(ContainerRuntime):
    """In-memory runtime standing in for Docker.

    The output mount is the host temp dir, so ``exists`` looks at the host path
    an artifact would land on. ``on_wait`` lets a test play the wrapper's part
    and drop artifacts there while the "container" runs.
    """

    def __init__(self, result: ProcessResult | None = None):
        self.result = result or ProcessResult(exit_code=0, stdout="hello\n\n", stderr="")
        self.on_wait: Callable[[RunContext], None] | None = None
        self.fail_remove = False
        self.running: set[str] = set()
        self.started: list[str] = []
        self.removed: list[str] = []
        self.probed: list[str] = []
        self.copied: list[str] = []
        self.events: list[tuple[str, str]] = []

    async def start(self, ctx: RunContext) -> None:
        assert ctx.container_name not in self.running
        self.running.add(ctx.container_name)
        self.started.append(ctx.container_name)
        self.events.append(("start", ctx.run_id))

    async def wait(self, ctx: RunContext) -> ProcessResult:
        if self.on_wait:
            self.on_wait(ctx)
        self.events.append(("wait", ctx.run_id))
        return self.result

    async def exists(self, ctx: RunContext, container_path: str) -> bool:
        self.probed.append(container_path)
        self.events.append(("exists", ctx.run_id))
        return (ctx.temp_dir / Path(container_path).name).is_file()

    async def copy_out(self, ctx: RunContext, container_path: str, host_path: Path) -> None:
        self.copied.append(container_path)
        self.events.append(("copy_out", ctx.run_id))

    async def remove(self, ctx: RunContext) -> None:
        self.events.append(("remove", ctx.run_id))
        if self.fail_remove:
            raise TeardownError("Failed to remove container: 409 Conflict")
        self.running.discard(ctx.container_name)
        self.removed.append(ctx.container_name)


@pytest.fixture
def runbox_config(tmp_path: Path) -> RunboxConfig:
    return RunboxConfig(temp_dir=tmp_path / "temp")


@pytest.fixture
def run_context(runbox_config: RunboxConfig) -> RunContext:
    return RunContext.create(runbox_config)


@pytest.fixture
def fake_runtime() -> FakeRuntime:
    return FakeRuntime()


@pytest.fixture
def mock_runtime() -> Any:
    mock = MagicMock()
    mock.start = AsyncMock()
    mock.wait = AsyncMock(return_value=ProcessResult(exit_code=0, stdout="out\n", stderr=""))
    mock.exists = AsyncMock(return_value=False)
    mock.copy_out = AsyncMock()
    mock.remove = AsyncMock()
    return mock


@pytest.fixture
def mock_docker_client() -> Generator[Any, None, None]:
    with patch("coreason_runbox.runtimes.docker.docker.from_env") as mock:
        yield mock
