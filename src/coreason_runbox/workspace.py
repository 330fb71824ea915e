# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runbox

from pathlib import Path

import aiofiles  # type: ignore[import-untyped]
import aiofiles.os  # type: ignore[import-untyped]

from coreason_runbox.exceptions import WorkspaceError
from coreason_runbox.models import RunContext
from coreason_runbox.utils.logger import logger


class WorkspaceManager:
    """Allocates the per-run host directory mounted read-only into the sandbox.

    Workspaces are retained after the run completes.
    """

    def __init__(self, temp_dir: Path):
        """Initializes the WorkspaceManager and creates the temp root.

        Args:
            temp_dir: Host directory holding all workspaces and artifacts.
        """
        self.temp_dir = temp_dir
        self.temp_dir.mkdir(parents=True, exist_ok=True)

    async def prepare(self, ctx: RunContext, code: str, wrapper_source: str) -> None:
        """Create the workspace for a run and write the user code and wrapper into it.

        Args:
            ctx: The run to prepare.
            code: The exact source submitted by the caller.
            wrapper_source: The rendered wrapper harness.

        Raises:
            WorkspaceError: If the directory or either file cannot be written.
        """
        try:
            # exist_ok=False: a workspace is never reused
            await aiofiles.os.makedirs(ctx.workspace_dir, exist_ok=False)

            async with aiofiles.open(ctx.user_code_path, "w", encoding="utf-8") as f:
                await f.write(code)

            async with aiofiles.open(ctx.wrapper_path, "w", encoding="utf-8") as f:
                await f.write(wrapper_source)
        except OSError as e:
            logger.bind(run_id=ctx.run_id).error(f"Failed to prepare workspace {ctx.workspace_dir}: {e}")
            raise WorkspaceError(f"Failed to prepare workspace: {e}") from e

        logger.bind(run_id=ctx.run_id).debug(f"Workspace ready at {ctx.workspace_dir}")
