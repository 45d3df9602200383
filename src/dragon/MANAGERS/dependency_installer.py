"""
Installation of project dependencies that ship a Makefile into the toolchain.
"""
import asyncio
import json
import logging
import os
from typing import Dict, List, Optional

from ..errors import AmbiguousDependencyError, ConfigurationError, DragonError
from ..MODELS.dependency import DependencyEntry
from ..MODELS.options import SELF_NAME
from ..UTILS.path_translator import to_container_path
from .toolchain_manager import ToolchainManager

logger = logging.getLogger(__name__)

MANIFEST = "package.json"
MAKEFILE = "Makefile"


async def gather_all(coroutines) -> list:
    """
    Runs coroutines concurrently and returns their results in order.

    The first failure cancels the remaining tasks and is re-raised as is,
    rather than wrapped in an ExceptionGroup.
    """
    try:
        async with asyncio.TaskGroup() as group:
            tasks = [group.create_task(coro) for coro in coroutines]
    except ExceptionGroup as eg:
        errors = eg.subgroup(DragonError)
        if errors is None:
            raise
        raise errors.exceptions[0] from None
    return [task.result() for task in tasks]


class DependencyInstaller:
    """
    Builds and installs the Makefile-based dependencies of the invoking project
    inside the toolchain container.
    """
    def __init__(self, manager: ToolchainManager, project_dir: Optional[str] = None):
        """
        Initializes the installer.

        :param manager: Manager of the toolchain container.
        :param project_dir: Directory holding the project's package.json.
        """
        self.manager = manager
        self.project_dir = project_dir or os.getcwd()

    @property
    def options(self):
        return self.manager.options

    def read_dependency_names(self) -> List[str]:
        """
        Reads direct and development dependencies from the project manifest,
        leaving out libdragon itself.
        """
        manifest_path = os.path.join(self.project_dir, MANIFEST)
        try:
            with open(manifest_path, 'r', encoding='utf-8') as f:
                manifest = json.load(f)
        except FileNotFoundError as e:
            raise ConfigurationError(f"No {MANIFEST} found in {self.project_dir}") from e
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid {manifest_path}: {e}") from e

        dependencies: Dict[str, str] = {}
        dependencies.update(manifest.get("dependencies") or {})
        dependencies.update(manifest.get("devDependencies") or {})
        return [name for name in dependencies if name != SELF_NAME]

    async def resolve(self, name: str) -> DependencyEntry:
        """
        Finds where npm installed a dependency.
        """
        listing = await self.manager.runner.run(
            ["npm", "ls", name, "--parseable=true"], cwd=self.project_dir
        )
        return DependencyEntry.from_listing(name, listing)

    async def install_dependency(self, entry: DependencyEntry) -> bool:
        """
        Runs make and make install for a dependency with a Makefile at its root.

        :return: False when the dependency was skipped.
        """
        if entry.path is None or not os.path.isfile(os.path.join(entry.path, MAKEFILE)):
            logger.debug("Skipping %s, no %s", entry.name, MAKEFILE)
            return False

        container_path = to_container_path(
            entry.path, self.options.mount_path, self.options.project_name, directory=True
        )
        logger.info("Installing %s from %s", entry.name, container_path)
        await self.manager.run_in_toolchain(["make", "-C", container_path])
        await self.manager.run_in_toolchain(["make", "-C", container_path, "install"])
        return True

    async def install(self) -> List[DependencyEntry]:
        """
        Starts a fresh toolchain and installs every Makefile-based dependency.

        :return: The dependencies that were built and installed.
        :raises AmbiguousDependencyError: If a dependency is installed in several versions.
        """
        await self.manager.download_images()
        await self.manager.ensure_started(force_latest_tag=True)

        names = self.read_dependency_names()
        entries = await gather_all(self.resolve(name) for name in names)

        for entry in entries:
            if entry.is_ambiguous:
                raise AmbiguousDependencyError(entry.name, entry.paths)

        installed = await gather_all(self.install_dependency(entry) for entry in entries)
        return [entry for entry, done in zip(entries, installed) if done]
