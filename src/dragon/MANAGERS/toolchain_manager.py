# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Lifecycle of the named toolchain container and the images it runs.
"""
import logging
from typing import List, Optional, Sequence

from ..MODELS.options import Options
from ..REGISTRY.image_reference import (
    BASE_VERSION,
    DOCKER_HUB_NAME,
    LATEST_TAG,
    UPDATE_LATEST,
    ImageReference,
)
from ..RUNNERS.process_runner import ProcessRunner

logger = logging.getLogger(__name__)

DOCKER = "docker"
DRAGON_DOCKERFILE = "./dragon.Dockerfile"


class ToolchainManager:
    """
    Owns the single container named after the project.

    At most one container with that name exists: every start removes the
    previous one before creating a fresh container bound to the mount path.
    When the tool already runs inside the container (IS_DOCKER=true) the
    container operations do nothing and builds run locally.
    """
    def __init__(self, options: Options, runner: Optional[ProcessRunner] = None):
        """
        Initializes the manager.

        :param options: Resolved configuration.
        :param runner: Runner used for every external command.
        """
        self.options = options
        self.runner = runner or ProcessRunner()

    @property
    def container_name(self) -> str:
        return self.options.project_name

    @property
    def mount_target(self) -> str:
        return "/" + self.options.project_name

    async def find_container(self, command: Sequence[str] = ("container", "ls", "-qa")) -> List[str]:
        """
        Lists ids of containers with exactly the reserved name, running or not.

        Blank output means no such container.
        """
        output = await self.runner.run(
            [DOCKER, *command, "-f", f"name=^/{self.container_name}$"]
        )
        return output.split()

    async def ensure_started(self, force_latest_tag: bool = False):
        """
        Replaces any existing toolchain container with a freshly started one.

        :param force_latest_tag: Run the versioned image even while self-building.
        """
        if self.options.is_docker:
            return

        container_ids = await self.find_container()
        if container_ids:
            logger.info("Removing existing container %s", self.container_name)
            await self.runner.run([DOCKER, "container", "rm", "-f", *container_ids])

        image = ImageReference.for_run(self.options.self_build, force_latest_tag)
        logger.info("Starting %s from %s", self.container_name, image)

        command = [DOCKER, "run", f"--name={self.container_name}"]
        if self.options.byte_swap:
            command += ["-e", "N64_BYTE_SWAP=true"]
        command += [
            "-e", "IS_DOCKER=true",
            "-d",
            "--mount", f"type=bind,source={self.options.mount_path},target={self.mount_target}",
            f"-w={self.mount_target}",
            image.full_name,
            "tail", "-f", "/dev/null",
        ]
        await self.runner.run(command)

    async def stop(self):
        """
        Removes the toolchain container if it exists.
        """
        if self.options.is_docker:
            return

        if await self.find_container(("ps", "-a", "-q")):
            logger.info("Removing container %s", self.container_name)
            await self.runner.run([DOCKER, "rm", "-f", self.container_name])

    async def download_images(self):
        """
        Pulls the base image, and the versioned image unless self-building.
        """
        if self.options.is_docker:
            return

        await self.runner.run([DOCKER, "pull", ImageReference.base().full_name])

        # The versioned image is not published yet during a self-build
        if not self.options.self_build:
            await self.runner.run([DOCKER, "pull", ImageReference.versioned().full_name])

    async def build_base_image(self):
        """
        Builds the toolchain image from the Dockerfile in the current directory.
        """
        if self.options.is_docker:
            return

        await self.runner.run([DOCKER, "build", "-t", ImageReference.base().full_name, "./"])

    async def build_own_image(self):
        """
        Builds libdragon on top of the base image and restarts the container on it.
        """
        await self.runner.run([
            DOCKER, "build",
            "--build-arg", f"DOCKER_HUB_NAME={DOCKER_HUB_NAME}",
            "--build-arg", f"BASE_VERSION={BASE_VERSION}",
            "-t", ImageReference.versioned().full_name,
            "-f", DRAGON_DOCKERFILE,
            "./",
        ])
        await self.ensure_started(force_latest_tag=True)

    async def push_images(self, update_latest: bool = UPDATE_LATEST):
        """
        Publishes the versioned image, and retags it as latest when enabled.

        Expects build_own_image to have run and the registry login to be done.
        """
        if self.options.is_docker:
            return

        await self.stop()

        versioned = ImageReference.versioned()
        await self.runner.run([DOCKER, "push", versioned.full_name])

        if update_latest:
            latest = versioned.with_tag(LATEST_TAG)
            await self.runner.run([DOCKER, "tag", versioned.full_name, latest.full_name])
            await self.runner.run([DOCKER, "push", latest.full_name])

    async def run_in_toolchain(self, command: Sequence[str]) -> str:
        """
        Runs a command in the toolchain, locally when already inside the container.
        """
        if self.options.is_docker:
            return await self.runner.run(list(command))
        return await self.runner.run([DOCKER, "exec", self.container_name, *command])

    async def make(self, args: Sequence[str] = ()) -> str:
        """
        Runs make with the given arguments inside the toolchain container.
        """
        if not self.options.is_docker:
            await self.runner.run([DOCKER, "start", self.container_name])
        return await self.run_in_toolchain(["make", *args])
