import asyncio
import io
import tarfile
from pathlib import Path
from typing import Iterator

import aiofiles  # type: ignore[import-untyped]
import docker
from docker.errors import DockerException, NotFound
from docker.models.containers import Container
from requests.exceptions import RequestException
from urllib3.exceptions import ProtocolError

from coreason_runbox.exceptions import ArtifactCopyError, ExecutionError, SpawnError, TeardownError
from coreason_runbox.models import ProcessResult, RunContext
from coreason_runbox.runtime import ContainerRuntime
from coreason_runbox.utils.logger import logger

# Go's os.ModeDir, as reported in the X-Docker-Container-Path-Stat header
_MODE_DIR = 1 << 31

# Transport failures surface from the requests/urllib3 layer under docker-py
_API_ERRORS = (DockerException, RequestException, ProtocolError)


def _exhaust(stream: Iterator[bytes]) -> None:
    for _ in stream:
        pass


class DockerRuntime(ContainerRuntime):
    """
    Docker-based implementation of the ContainerRuntime.

    One container per run, named after the run id. Blocking docker-py calls are
    offloaded to worker threads so concurrent runs do not block each other.
    """

    def __init__(
        self,
        image: str = "coreason-runbox-python:latest",
        cpu_limit: float = 0.5,
        mem_limit: str = "512m",
        working_dir: str = "/app",
    ):
        self.client = docker.from_env()
        self.image = image
        self.cpu_limit = cpu_limit
        self.mem_limit = mem_limit
        self.working_dir = working_dir

    async def start(self, ctx: RunContext) -> None:
        """
        Launch the sandbox container for a run.
        """
        logger.bind(run_id=ctx.run_id).info(f"Starting Docker sandbox with image {self.image}")
        try:
            container = await asyncio.to_thread(
                self.client.containers.run,
                self.image,
                command=ctx.wrapper_command,
                name=ctx.container_name,
                detach=True,
                network_mode="none",
                mem_limit=self.mem_limit,
                nano_cpus=int(self.cpu_limit * 1e9),
                working_dir=self.working_dir,
                volumes={
                    str(ctx.workspace_dir): {"bind": ctx.code_mount, "mode": "ro"},
                    str(ctx.temp_dir): {"bind": ctx.output_mount, "mode": "rw"},
                },
            )
        except _API_ERRORS as e:
            logger.bind(run_id=ctx.run_id).error(f"Failed to start Docker sandbox: {e}")
            await self._discard_created(ctx)
            raise SpawnError(f"Failed to start sandbox: {e}") from e

        logger.bind(run_id=ctx.run_id).info(f"Docker sandbox started: {container.short_id}")

    async def _discard_created(self, ctx: RunContext) -> None:
        """Remove a container that was created but never started."""
        try:
            container = await self._get_container(ctx)
            await asyncio.to_thread(container.remove, force=True)
        except NotFound:
            return
        except _API_ERRORS as e:
            logger.bind(run_id=ctx.run_id).warning(f"Failed to discard unstarted container: {e}")

    async def _get_container(self, ctx: RunContext) -> Container:
        return await asyncio.to_thread(self.client.containers.get, ctx.container_name)

    async def _drain(self, container: Container, stdout: bool, stderr: bool) -> str:
        """Accumulate one log stream chunk by chunk until the process exits."""
        stream = await asyncio.to_thread(container.logs, stdout=stdout, stderr=stderr, stream=True, follow=True)
        buffer = bytearray()
        while True:
            chunk = await asyncio.to_thread(next, stream, None)
            if chunk is None:
                break
            buffer.extend(chunk)
        return buffer.decode("utf-8", errors="replace")

    async def wait(self, ctx: RunContext) -> ProcessResult:
        """
        Stream stdout/stderr and wait for the sandbox process to exit.
        """
        try:
            container = await self._get_container(ctx)
            stdout, stderr = await asyncio.gather(
                self._drain(container, stdout=True, stderr=False),
                self._drain(container, stdout=False, stderr=True),
            )
            status = await asyncio.to_thread(container.wait)
        except _API_ERRORS as e:
            logger.bind(run_id=ctx.run_id).error(f"Failed to await Docker sandbox: {e}")
            raise ExecutionError(f"Failed to read sandbox output: {e}") from e

        exit_code = int(status.get("StatusCode", -1))
        logger.bind(run_id=ctx.run_id).info(f"Docker sandbox exited with status {exit_code}")
        return ProcessResult(exit_code=exit_code, stdout=stdout, stderr=stderr)

    async def exists(self, ctx: RunContext, container_path: str) -> bool:
        """
        Probe the container filesystem for a regular file.

        Decides from the stat header of the archive endpoint, which also works
        once the container has exited.
        """
        try:
            container = await self._get_container(ctx)
            bits, stat = await asyncio.to_thread(container.get_archive, container_path)
            # Drain the body so the streamed response is released
            await asyncio.to_thread(_exhaust, bits)
        except NotFound:
            return False
        except _API_ERRORS as e:
            logger.bind(run_id=ctx.run_id).warning(f"Existence probe for {container_path} failed: {e}")
            return False

        if stat and int(stat.get("mode", 0)) & _MODE_DIR:
            return False
        return True

    async def copy_out(self, ctx: RunContext, container_path: str, host_path: Path) -> None:
        """
        Copy a file out of the container.
        """
        logger.bind(run_id=ctx.run_id).info(f"Copying {container_path} to {host_path} from sandbox")

        try:
            container = await self._get_container(ctx)
            bits, _ = await asyncio.to_thread(container.get_archive, container_path)
            # Buffer the whole archive: host_path may be the same file through the output mount
            tar_bytes = await asyncio.to_thread(b"".join, bits)
        except _API_ERRORS as e:
            raise ArtifactCopyError(f"Failed to copy {container_path} from container: {e}") from e

        try:
            with tarfile.open(fileobj=io.BytesIO(tar_bytes), mode="r") as tar:
                member = tar.next()
                if member is None or not member.isfile():
                    raise ArtifactCopyError(f"No regular file in archive for {container_path}")

                f = tar.extractfile(member)
                if f is None:
                    raise ArtifactCopyError(f"Failed to extract {container_path} from archive")
                content = f.read()

            async with aiofiles.open(host_path, "wb") as local_f:
                await local_f.write(content)
        except (tarfile.TarError, OSError) as e:
            raise ArtifactCopyError(f"Failed to copy {container_path} from container: {e}") from e

    async def remove(self, ctx: RunContext) -> None:
        """
        Destroy the sandbox container.
        """
        logger.bind(run_id=ctx.run_id).info(f"Removing Docker sandbox: {ctx.container_name}")
        try:
            container = await self._get_container(ctx)
            await asyncio.to_thread(container.remove)
        except _API_ERRORS as e:
            logger.bind(run_id=ctx.run_id).error(f"Failed to remove Docker sandbox: {e}")
            raise TeardownError(f"Failed to remove container: {e}") from e
