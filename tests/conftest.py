"""
Shared fixtures: a recording stand-in for the docker, make and npm CLIs.
"""
import itertools
import re

import pytest

from dragon.errors import ExecutionError
from dragon.MODELS.options import Options


class FakeEngine:
    """
    Records every command and keeps just enough container state to answer
    name-filtered listings the way the docker CLI does.
    """
    def __init__(self):
        self.commands = []
        self.containers = {}
        self.npm_listings = {}
        self.failing = []
        self._ids = itertools.count(1)

    async def run(self, command, cwd=None):
        self.commands.append(list(command))
        for predicate in self.failing:
            if predicate(command):
                raise ExecutionError(command, 2, "boom")

        if command[0] == "npm":
            return self.npm_listings.get(command[2], "")
        if command[0] != "docker":
            return ""

        args = command[1:]
        if args[:3] == ["container", "ls", "-qa"] or args[:3] == ["ps", "-a", "-q"]:
            name = re.match(r"name=\^/(.*)\$", args[-1]).group(1)
            return "".join(f"{cid}\n" for cid, n in self.containers.items() if n == name)
        if args[:3] == ["container", "rm", "-f"]:
            for cid in args[3:]:
                self.containers.pop(cid, None)
        elif args[:2] == ["rm", "-f"]:
            for cid, n in list(self.containers.items()):
                if n == args[2]:
                    del self.containers[cid]
        elif args[0] == "run":
            name = args[1].split("=", 1)[1]
            if name in self.containers.values():
                raise ExecutionError(command, 125, "Conflict. The container name is already in use")
            self.containers[f"c{next(self._ids)}"] = name
        return ""

    def docker_commands(self, verb):
        return [c for c in self.commands if c[0] == "docker" and c[1] == verb]


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def options(tmp_path):
    return Options(project_name="mygame", mount_path=str(tmp_path))


@pytest.fixture
def docker_options(tmp_path):
    return Options(project_name="mygame", mount_path=str(tmp_path), is_docker=True)
