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

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RunboxConfig(BaseSettings):
    """
    Configuration for the run orchestrator and its Docker sandbox.
    """

    docker_image: str = "coreason-runbox-python:latest"

    # Host directory holding per-run workspaces and extracted artifacts.
    # Mounted read-write into every sandbox, so it must be absolute.
    temp_dir: Path = Path("temp")

    mem_limit: str = "512m"
    cpu_limit: float = Field(default=0.5, gt=0)

    working_dir: str = "/app"
    code_mount: str = "/app/code"
    output_mount: str = "/app/output"
    data_glob: str = "*.csv"

    enable_audit_logging: bool = True

    # None keeps the unbounded behaviour: every execute() launches a container.
    max_concurrent_runs: int | None = Field(default=None, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="COREASON_RUNBOX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("temp_dir")
    @classmethod
    def _resolve_temp_dir(cls, value: Path) -> Path:
        return value.expanduser().resolve()

    @field_validator("code_mount", "output_mount", "working_dir")
    @classmethod
    def _require_absolute(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError(f"Container path must be absolute: {value}")
        return value.rstrip("/") or "/"
