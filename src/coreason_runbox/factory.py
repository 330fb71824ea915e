from coreason_runbox.config import RunboxConfig
from coreason_runbox.runtime import ContainerRuntime
from coreason_runbox.runtimes.docker import DockerRuntime


class RuntimeFactory:
    """
    Factory to create ContainerRuntime instances based on configuration.
    """

    @staticmethod
    def get_runtime(config: RunboxConfig) -> ContainerRuntime:
        """
        Returns an instance of the configured ContainerRuntime.
        """
        return DockerRuntime(
            image=config.docker_image,
            cpu_limit=config.cpu_limit,
            mem_limit=config.mem_limit,
            working_dir=config.working_dir,
        )
