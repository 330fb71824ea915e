# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runbox

"""
coreason-runbox
"""

__version__ = "0.1.0"
__author__ = "Gowtham A Rao"
__email__ = "gowtham.rao@coreason.ai"

from .config import RunboxConfig
from .exceptions import (
    ArtifactCopyError,
    ExecutionError,
    RunboxError,
    SpawnError,
    TeardownError,
    WorkspaceError,
)
from .models import ArtifactKind, RunContext, RunResult, RunState
from .orchestrator import Runbox, RunOrchestrator
from .runtime import ContainerRuntime
from .runtimes.docker import DockerRuntime

__all__ = [
    "ArtifactCopyError",
    "ArtifactKind",
    "ContainerRuntime",
    "DockerRuntime",
    "ExecutionError",
    "RunContext",
    "RunOrchestrator",
    "RunResult",
    "RunState",
    "Runbox",
    "RunboxConfig",
    "RunboxError",
    "SpawnError",
    "TeardownError",
    "WorkspaceError",
]
