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
Image references for the toolchain images published on Docker Hub.
"""

from dataclasses import dataclass, replace

from .. import __version__

DOCKER_HUB_NAME = "anacierdem/libdragon"
BASE_VERSION = "toolchain"
LATEST_TAG = "latest"

# Also tag and push "latest" when publishing a new version
UPDATE_LATEST = True


@dataclass(frozen=True)
class ImageReference:
    """
    Repository and tag of a toolchain image.

    Examples:
        - ImageReference.base() -> anacierdem/libdragon:toolchain
        - ImageReference.versioned() -> anacierdem/libdragon:<package version>
    """

    repository: str = DOCKER_HUB_NAME
    tag: str = BASE_VERSION

    @classmethod
    def base(cls) -> "ImageReference":
        """The unversioned foundational toolchain image."""
        return cls(tag=BASE_VERSION)

    @classmethod
    def versioned(cls, version: str = __version__) -> "ImageReference":
        """The image carrying libdragon itself at the given version."""
        return cls(tag=version)

    @classmethod
    def for_run(cls, self_build: bool, force_latest_tag: bool = False) -> "ImageReference":
        """
        Select the image a new toolchain container runs.

        Args:
            self_build: Whether libdragon is building itself in CI.
            force_latest_tag: Use the versioned image even during a self-build.

        Returns:
            The base image while self-building (the versioned image is not
            published yet), the versioned image otherwise.
        """
        if self_build and not force_latest_tag:
            return cls.base()
        return cls.versioned()

    def with_tag(self, tag: str) -> "ImageReference":
        return replace(self, tag=tag)

    @property
    def full_name(self) -> str:
        """Get the image name with tag."""
        return f"{self.repository}:{self.tag}"

    def __str__(self) -> str:
        return self.full_name

    def __repr__(self) -> str:
        return f"ImageReference({self.full_name})"
