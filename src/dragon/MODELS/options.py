"""
Process-wide configuration for the toolchain wrapper.
"""
import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, computed_field

SELF_NAME = "libdragon"


class Options(BaseModel):
    """
    Configuration resolved once from defaults, the environment and CLI flags.
    Every operation receives it explicitly and it never changes afterwards.
    """
    model_config = ConfigDict(frozen=True)

    project_name: str = SELF_NAME
    byte_swap: bool = False
    mount_path: str
    is_ci: bool = False
    is_docker: bool = False

    @computed_field
    @property
    def self_build(self) -> bool:
        """
        True when libdragon builds its own image in CI, before the versioned
        image exists in the registry.
        """
        return self.project_name == SELF_NAME and self.is_ci

    @classmethod
    def from_environment(cls,
                         environ: Optional[Mapping[str, str]] = None,
                         mount_path: Optional[str] = None,
                         byte_swap: bool = False,
                         cwd: Optional[str] = None) -> "Options":
        """
        Builds the options from an environment snapshot and parsed flags.

        :param environ: Environment variables. Defaults to os.environ.
        :param mount_path: Value of --mount-path, relative to cwd or absolute.
        :param byte_swap: Whether --byte-swap was given.
        :param cwd: Directory the tool was started from. Defaults to os.getcwd().
        :return: The resolved options.
        """
        env = os.environ if environ is None else environ
        base_dir = cwd or os.getcwd()

        if mount_path:
            resolved_mount = os.path.abspath(os.path.join(base_dir, mount_path))
        else:
            resolved_mount = os.path.abspath(base_dir)

        return cls(
            # npm exports the active package's name to scripts it runs
            project_name=env.get("npm_package_name") or SELF_NAME,
            byte_swap=byte_swap,
            mount_path=resolved_mount,
            is_ci=env.get("CI") == "true",
            is_docker=env.get("IS_DOCKER") == "true",
        )
