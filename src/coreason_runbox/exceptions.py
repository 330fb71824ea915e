# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runbox

"""Error taxonomy for a single sandboxed run.

Every fatal error short-circuits the run and is reported to the caller as a
failed ``RunResult`` carrying ``str(error)``. ``ArtifactCopyError`` is the only
non-fatal kind: the extractor logs it and omits the artifact.

A logical error inside user code is deliberately not part of this hierarchy.
The wrapper harness reports it as an ``"Error: <message>"`` line in the
captured output and the run still succeeds.
"""


class RunboxError(Exception):
    """Base class for orchestrator errors."""


class WorkspaceError(RunboxError):
    """The per-run workspace directory could not be created or populated."""


class SpawnError(RunboxError):
    """The sandbox container could not be started at all."""


class ExecutionError(RunboxError):
    """The sandbox process exited with a non-zero status or could not be awaited."""

    def __init__(self, message: str, exit_code: int | None = None, stderr: str = ""):
        super().__init__(message)
        self.exit_code = exit_code
        self.stderr = stderr


class ArtifactCopyError(RunboxError):
    """An artifact confirmed present inside the container failed to copy out."""


class TeardownError(RunboxError):
    """The sandbox container could not be removed."""
