"""
Models for dependencies of the project being built.
"""
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict


class DependencyEntry(BaseModel):
    """
    A dependency of the invoking project and the locations it is installed at.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    paths: Tuple[str, ...] = ()

    @property
    def is_ambiguous(self) -> bool:
        return len(self.paths) > 1

    @property
    def path(self) -> Optional[str]:
        return self.paths[0] if self.paths else None

    @classmethod
    def from_listing(cls, name: str, listing: str) -> "DependencyEntry":
        """
        Builds an entry from parseable ``npm ls`` output, one path per line.
        Blank lines are dropped and repeated paths kept once, in order.
        """
        paths = [line.strip() for line in listing.splitlines() if line.strip()]
        return cls(name=name, paths=tuple(dict.fromkeys(paths)))
