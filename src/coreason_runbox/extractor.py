# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runbox

from coreason_runbox.exceptions import ArtifactCopyError
from coreason_runbox.models import ArtifactKind, RunContext
from coreason_runbox.runtime import ContainerRuntime
from coreason_runbox.utils.logger import logger


class ArtifactExtractor:
    """Copies well-known artifacts out of an exited sandbox before teardown."""

    def __init__(self, runtime: ContainerRuntime):
        self.runtime = runtime

    async def extract(self, ctx: RunContext) -> dict[ArtifactKind, str]:
        """Probe for each expected artifact and copy the ones that exist.

        Artifacts are independent: a missing or failed artifact does not stop
        the next one from being checked. A copy is only attempted after the
        probe confirmed the file inside the container.

        Args:
            ctx: The run whose sandbox exited with status 0.

        Returns:
            dict[ArtifactKind, str]: Filenames of the artifacts copied to the host.
        """
        found: dict[ArtifactKind, str] = {}

        for kind in ArtifactKind:
            container_path = ctx.container_artifact_path(kind)

            if not await self.runtime.exists(ctx, container_path):
                logger.bind(run_id=ctx.run_id).info(f"File {ctx.artifact_name(kind)} not found in container")
                continue

            try:
                await self.runtime.copy_out(ctx, container_path, ctx.host_artifact_path(kind))
            except ArtifactCopyError as e:
                logger.bind(run_id=ctx.run_id).warning(f"Failed to retrieve {kind.value} artifact: {e}")
                continue

            logger.bind(run_id=ctx.run_id).info(f"Successfully copied {ctx.artifact_name(kind)} from container")
            found[kind] = ctx.artifact_name(kind)

        return found
