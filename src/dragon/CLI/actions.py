"""
Mapping of CLI verbs to toolchain operations.
"""
from typing import Awaitable, Callable, Dict, Sequence

from ..MANAGERS.dependency_installer import DependencyInstaller
from ..MANAGERS.toolchain_manager import ToolchainManager

Action = Callable[[ToolchainManager, Sequence[str]], Awaitable[object]]


async def start(manager: ToolchainManager, args: Sequence[str]):
    await manager.ensure_started()


async def download(manager: ToolchainManager, args: Sequence[str]):
    await manager.download_images()


async def init(manager: ToolchainManager, args: Sequence[str]):
    """Build the toolchain image, then libdragon on top of it."""
    if manager.options.is_docker:
        return
    await manager.build_base_image()
    await manager.build_own_image()


async def install(manager: ToolchainManager, args: Sequence[str]):
    await DependencyInstaller(manager).install()


async def make(manager: ToolchainManager, args: Sequence[str]):
    await manager.make(args)


async def stop(manager: ToolchainManager, args: Sequence[str]):
    await manager.stop()


async def build_dragon(manager: ToolchainManager, args: Sequence[str]):
    await manager.build_own_image()


async def update(manager: ToolchainManager, args: Sequence[str]):
    """Publish the built images. Requires a prior `docker login`."""
    await manager.push_images()


ACTIONS: Dict[str, Action] = {
    "start": start,
    "download": download,
    "init": init,
    "install": install,
    "make": make,
    "stop": stop,
    "buildDragon": build_dragon,
    "update": update,
}
