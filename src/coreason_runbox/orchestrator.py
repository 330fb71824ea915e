# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runbox

import asyncio
from contextlib import nullcontext

import anyio

from coreason_runbox.config import RunboxConfig
from coreason_runbox.exceptions import ExecutionError, RunboxError
from coreason_runbox.extractor import ArtifactExtractor
from coreason_runbox.factory import RuntimeFactory
from coreason_runbox.models import ArtifactKind, RunContext, RunResult, RunState
from coreason_runbox.runtime import ContainerRuntime
from coreason_runbox.utils.audit import AuditLogger
from coreason_runbox.utils.logger import logger
from coreason_runbox.workspace import WorkspaceManager
from coreason_runbox.wrapper import render_wrapper


class RunOrchestrator:
    """Async-native run orchestrator (The Core).

    Runs each snippet in its own container:
    workspace -> start -> wait -> extract (exit 0 only) -> remove.
    The container is removed exactly once whenever it was started, and the
    caller never sees a result before removal was attempted.
    """

    def __init__(
        self,
        config: RunboxConfig | None = None,
        runtime: ContainerRuntime | None = None,
    ):
        """Initializes the RunOrchestrator.

        Args:
            config: Configuration for the orchestrator and sandbox.
            runtime: Optional container runtime; built from config if omitted.
        """
        self.config = config or RunboxConfig()
        self.runtime = runtime or RuntimeFactory.get_runtime(self.config)
        self.workspace = WorkspaceManager(self.config.temp_dir)
        self.extractor = ArtifactExtractor(self.runtime)
        self.audit = AuditLogger(enabled=self.config.enable_audit_logging)
        self._admission: asyncio.Semaphore | None = None
        if self.config.max_concurrent_runs:
            self._admission = asyncio.Semaphore(self.config.max_concurrent_runs)

    async def execute(self, code: str) -> RunResult:
        """Runs code to completion in a fresh sandbox.

        Fatal errors are returned as a failed result carrying the error message.
        Exceptions raised by user code are reported inside ``output`` as an
        ``Error:`` line and do not fail the run.

        Args:
            code: The Python source to execute.

        Returns:
            RunResult: The outcome of the run.
        """
        ctx = RunContext.create(self.config)
        logger.bind(run_id=ctx.run_id).info("Starting code run")
        self.audit.log_run_start(ctx, code)

        async with self._admission or nullcontext():
            try:
                return await self._run(ctx, code)
            except RunboxError as e:
                logger.bind(run_id=ctx.run_id).error(f"Error running code: {e}")
                self._transition(ctx, RunState.FAILED)
                return RunResult(run_id=ctx.run_id, state=RunState.FAILED, success=False, output=str(e))

    async def _run(self, ctx: RunContext, code: str) -> RunResult:
        await self.workspace.prepare(ctx, code, render_wrapper(ctx, self.config.data_glob))
        self._transition(ctx, RunState.WORKSPACE_READY)

        await self.runtime.start(ctx)
        self._transition(ctx, RunState.CONTAINER_RUNNING)

        artifacts: dict[ArtifactKind, str] = {}
        try:
            process = await self.runtime.wait(ctx)
            if process.exit_code == 0:
                self._transition(ctx, RunState.EXTRACTING)
                artifacts = await self.extractor.extract(ctx)
        finally:
            await self.runtime.remove(ctx)
            self._transition(ctx, RunState.CONTAINER_REMOVED)

        if process.exit_code != 0:
            raise ExecutionError(
                f"Docker process failed: {process.stderr}",
                exit_code=process.exit_code,
                stderr=process.stderr,
            )

        self._transition(ctx, RunState.SUCCEEDED)
        return RunResult(
            run_id=ctx.run_id,
            state=RunState.SUCCEEDED,
            success=True,
            output=process.stdout,
            plot_file=artifacts.get(ArtifactKind.PLOT),
            data_file=artifacts.get(ArtifactKind.DATA),
        )

    @staticmethod
    def _transition(ctx: RunContext, state: RunState) -> None:
        logger.bind(run_id=ctx.run_id).debug(f"Run {ctx.run_id} -> {state.value}")


class Runbox:
    """Sync Facade for RunOrchestrator (The Facade).

    Wraps RunOrchestrator and executes runs via anyio.run.
    """

    def __init__(
        self,
        config: RunboxConfig | None = None,
        runtime: ContainerRuntime | None = None,
    ):
        """Initializes the Runbox facade.

        Args:
            config: Configuration for the orchestrator and sandbox.
            runtime: Optional container runtime.
        """
        self._async = RunOrchestrator(config, runtime)

    @property
    def config(self) -> RunboxConfig:
        return self._async.config

    def execute(self, code: str) -> RunResult:
        """Runs code to completion in a fresh sandbox, synchronously.

        Args:
            code: The Python source to execute.

        Returns:
            RunResult: The outcome of the run.
        """
        return anyio.run(self._async.execute, code)
