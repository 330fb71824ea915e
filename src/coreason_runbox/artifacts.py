import base64
import mimetypes
from pathlib import Path

import aiofiles  # type: ignore[import-untyped]

from coreason_runbox.models import FileReference, RunResult


class ArtifactManager:
    """Describes artifacts that a run left in the host output directory."""

    def __init__(self, temp_dir: Path):
        """Initializes the ArtifactManager.

        Args:
            temp_dir: Host directory the artifacts were copied into.
        """
        self.temp_dir = temp_dir

    async def describe(self, filename: str) -> FileReference:
        """Build a FileReference for an artifact on the host.

        Images are inlined as Base64 data URIs.

        Args:
            filename: The artifact filename, as reported in a RunResult.

        Returns:
            FileReference: A reference object containing metadata and, for images, a data URI.

        Raises:
            FileNotFoundError: If the artifact does not exist on the host.
        """
        file_path = self.temp_dir / Path(filename).name
        if not file_path.is_file():
            raise FileNotFoundError(f"Artifact file not found: {file_path}")

        mime_type, _ = mimetypes.guess_type(filename)
        if not mime_type:
            mime_type = "application/octet-stream"

        file_ref = FileReference(
            filename=filename,
            path=str(file_path),
            content_type=mime_type,
            size_bytes=file_path.stat().st_size,
        )

        if mime_type.startswith("image/"):
            async with aiofiles.open(file_path, "rb") as f:
                content = await f.read()
                encoded = base64.b64encode(content).decode("utf-8")
                file_ref.url = f"data:{mime_type};base64,{encoded}"

        return file_ref

    async def collect(self, result: RunResult) -> list[FileReference]:
        """Describe every artifact reported by a run, plot first."""
        return [await self.describe(name) for name in (result.plot_file, result.data_file) if name]
