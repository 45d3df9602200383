"""
Exceptions raised by the toolchain wrapper.
"""
from typing import Optional, Sequence


class DragonError(Exception):
    """
    Base class for every failure the CLI turns into a non-zero exit status.
    """


class ExecutionError(DragonError):
    """
    An external command exited with a non-zero status.
    """
    def __init__(self, command: Sequence[str], returncode: int, stderr: Optional[str] = None):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr or ""
        super().__init__(f"Command '{' '.join(self.command)}' exited with status {returncode}")


class AmbiguousDependencyError(DragonError):
    """
    A dependency resolved to more than one install location.
    """
    def __init__(self, name: str, paths: Sequence[str]):
        self.name = name
        self.paths = tuple(paths)
        super().__init__(
            f"Dependency {name} resolves to {len(self.paths)} locations "
            f"({', '.join(self.paths)}); using the same dependency with different versions is not supported"
        )


class PathTranslationError(DragonError):
    """
    A host path cannot be expressed inside the container's bind mount.
    """
    def __init__(self, host_path: str, mount_path: str):
        self.host_path = host_path
        self.mount_path = mount_path
        super().__init__(f"{host_path} is outside of the mounted directory {mount_path}")


class ConfigurationError(DragonError):
    """
    The invoking project is missing or has an unreadable manifest.
    """
