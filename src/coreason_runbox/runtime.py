# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runbox

from abc import ABC, abstractmethod
from pathlib import Path

from coreason_runbox.models import ProcessResult, RunContext


class ContainerRuntime(ABC):
    """
    Abstract base class for container runtimes that host a single run.
    Follows the Strategy Pattern.

    Every operation is keyed by the run's ``RunContext``; implementations keep
    no per-run state between calls.
    """

    @abstractmethod
    async def start(self, ctx: RunContext) -> None:
        """Launch the sandbox for a run.

        Starts one isolated container named after the run, with the workspace
        mounted read-only, the shared output directory mounted read-write, no
        network and fixed resource ceilings. The wrapper script is the entry
        command.

        Args:
            ctx: The run to launch.

        Raises:
            SpawnError: If the sandbox could not be started at all.
        """
        pass  # pragma: no cover

    @abstractmethod
    async def wait(self, ctx: RunContext) -> ProcessResult:
        """Stream the sandbox output and wait for its process to exit.

        Args:
            ctx: The running run.

        Returns:
            ProcessResult: The exit status and the accumulated stdout and stderr.

        Raises:
            ExecutionError: If the output streams or the exit status cannot be read.
        """
        pass  # pragma: no cover

    @abstractmethod
    async def exists(self, ctx: RunContext, container_path: str) -> bool:
        """Check whether a regular file exists inside the container filesystem.

        Args:
            ctx: The run whose container is probed.
            container_path: Absolute path inside the container.

        Returns:
            bool: True if the file exists. Probe failures report False.
        """
        pass  # pragma: no cover

    @abstractmethod
    async def copy_out(self, ctx: RunContext, container_path: str, host_path: Path) -> None:
        """Copy a file from the container filesystem to the host.

        Args:
            ctx: The run whose container holds the file.
            container_path: Absolute path inside the container.
            host_path: Destination on the host.

        Raises:
            ArtifactCopyError: If the copy fails.
        """
        pass  # pragma: no cover

    @abstractmethod
    async def remove(self, ctx: RunContext) -> None:
        """Destroy the run's container.

        Args:
            ctx: The run whose container is removed.

        Raises:
            TeardownError: If the container cannot be removed, including when it is already gone.
        """
        pass  # pragma: no cover
