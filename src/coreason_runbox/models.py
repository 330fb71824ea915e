# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runbox

from enum import Enum
from pathlib import Path
from uuid import uuid4

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from coreason_runbox.config import RunboxConfig


class ArtifactKind(str, Enum):
    """An optional byproduct of a run, surfaced through the shared output mount."""

    PLOT = "plot"
    DATA = "data"

    @property
    def suffix(self) -> str:
        return "_plot.png" if self is ArtifactKind.PLOT else "_data.csv"


class RunState(str, Enum):
    CREATED = "created"
    WORKSPACE_READY = "workspace-ready"
    CONTAINER_RUNNING = "container-running"
    EXTRACTING = "extracting"
    CONTAINER_REMOVED = "container-removed"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class RunContext(BaseModel):
    """Identity of a single run.

    The container name, the workspace directory and every artifact filename
    are derived from ``run_id`` here and nowhere else, so concurrent runs never
    collide in the shared output directory.

    Attributes:
        run_id: Process-wide unique identifier of the run.
        temp_dir: Absolute host directory holding workspaces and artifacts.
        code_mount: Read-only mount point of the workspace inside the sandbox.
        output_mount: Read-write mount point of ``temp_dir`` inside the sandbox.
    """

    model_config = ConfigDict(frozen=True)

    run_id: str
    temp_dir: Path
    code_mount: str = "/app/code"
    output_mount: str = "/app/output"

    @classmethod
    def create(cls, config: RunboxConfig) -> "RunContext":
        return cls(
            run_id=str(uuid4()),
            temp_dir=config.temp_dir,
            code_mount=config.code_mount,
            output_mount=config.output_mount,
        )

    @property
    def container_name(self) -> str:
        return self.run_id

    @property
    def workspace_dir(self) -> Path:
        return self.temp_dir / self.run_id

    @property
    def user_code_path(self) -> Path:
        return self.workspace_dir / "user_code.py"

    @property
    def wrapper_path(self) -> Path:
        return self.workspace_dir / "wrapper.py"

    @property
    def wrapper_command(self) -> list[str]:
        return ["python", f"{self.code_mount}/{self.wrapper_path.name}"]

    def artifact_name(self, kind: ArtifactKind) -> str:
        return f"{self.run_id}{kind.suffix}"

    def container_artifact_path(self, kind: ArtifactKind) -> str:
        return f"{self.output_mount}/{self.artifact_name(kind)}"

    def host_artifact_path(self, kind: ArtifactKind) -> Path:
        return self.temp_dir / self.artifact_name(kind)


class ProcessResult(BaseModel):
    """Exit status and accumulated streams of a finished sandbox process."""

    exit_code: int
    stdout: str
    stderr: str


class RunResult(BaseModel):
    """Represents the outcome of one ``execute`` call.

    Attributes:
        run_id: Identifier of the run.
        state: Terminal state, ``succeeded`` or ``failed``.
        success: True iff the sandbox exited 0 and the container was removed.
        output: Captured stdout on success, a human-readable error otherwise.
        plot_file: Plot artifact filename, set only if it was copied out.
        data_file: Data artifact filename, set only if it was copied out.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    run_id: str
    state: RunState
    success: bool
    output: str
    plot_file: str | None = None
    data_file: str | None = None


class FileReference(BaseModel):
    """Represents an artifact file on the host.

    Attributes:
        filename: The artifact filename.
        path: The host path of the file.
        content_type: The MIME type of the file content.
        size_bytes: The size of the file in bytes.
        url: A data URI for image artifacts.
    """

    filename: str
    path: str
    content_type: str | None = None
    size_bytes: int | None = None
    url: str | None = None
