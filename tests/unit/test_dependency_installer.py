"""
Unit tests for installing Makefile-based dependencies.
"""
import json
import os
import sys
import textwrap

import pytest

from dragon.errors import AmbiguousDependencyError, ConfigurationError, ExecutionError
from dragon.MANAGERS.dependency_installer import DependencyInstaller
from dragon.MANAGERS.toolchain_manager import ToolchainManager
from dragon.RUNNERS.process_runner import ProcessRunner


def write_project(root, dependencies=None, dev_dependencies=None):
    manifest = {"name": "mygame"}
    if dependencies is not None:
        manifest["dependencies"] = dependencies
    if dev_dependencies is not None:
        manifest["devDependencies"] = dev_dependencies
    (root / "package.json").write_text(json.dumps(manifest))


def add_module(root, name, makefile=True):
    path = root / "node_modules" / name
    path.mkdir(parents=True)
    if makefile:
        (path / "Makefile").write_text("all:\n")
    return str(path)


def make_calls(engine):
    return [c for c in engine.commands if "make" in c]


class TestDependencyInstaller:
    """Tests for DependencyInstaller."""

    def test_reads_both_dependency_kinds_without_libdragon(self, engine, options, tmp_path):
        write_project(tmp_path, {"libdragon": "^1.0", "ugfx": "^1.0"}, {"mikmod": "^1.0"})
        installer = DependencyInstaller(ToolchainManager(options, engine), str(tmp_path))
        assert installer.read_dependency_names() == ["ugfx", "mikmod"]

    def test_missing_manifest(self, engine, options, tmp_path):
        installer = DependencyInstaller(ToolchainManager(options, engine), str(tmp_path))
        with pytest.raises(ConfigurationError):
            installer.read_dependency_names()

    @pytest.mark.asyncio
    async def test_install_starts_toolchain_first(self, engine, options, tmp_path):
        write_project(tmp_path)
        installer = DependencyInstaller(ToolchainManager(options, engine), str(tmp_path))
        assert await installer.install() == []

        assert engine.commands[0][:2] == ["docker", "pull"]
        assert list(engine.containers.values()) == ["mygame"]

    @pytest.mark.asyncio
    async def test_installs_dependency_with_makefile(self, engine, options, tmp_path):
        write_project(tmp_path, {"ugfx": "^1.0"})
        engine.npm_listings["ugfx"] = add_module(tmp_path, "ugfx") + "\n"

        installer = DependencyInstaller(ToolchainManager(options, engine), str(tmp_path))
        installed = await installer.install()

        assert [e.name for e in installed] == ["ugfx"]
        assert ["npm", "ls", "ugfx", "--parseable=true"] in engine.commands
        assert make_calls(engine) == [
            ["docker", "exec", "mygame", "make", "-C", "/mygame/node_modules/ugfx/"],
            ["docker", "exec", "mygame", "make", "-C", "/mygame/node_modules/ugfx/", "install"],
        ]

    @pytest.mark.asyncio
    async def test_skips_dependency_without_makefile(self, engine, options, tmp_path):
        write_project(tmp_path, {"lodash": "^4.0"})
        engine.npm_listings["lodash"] = add_module(tmp_path, "lodash", makefile=False)

        installer = DependencyInstaller(ToolchainManager(options, engine), str(tmp_path))
        assert await installer.install() == []
        assert make_calls(engine) == []

    @pytest.mark.asyncio
    async def test_duplicate_listing_lines_are_one_path(self, engine, options, tmp_path):
        write_project(tmp_path, {"ugfx": "^1.0"})
        path = add_module(tmp_path, "ugfx")
        engine.npm_listings["ugfx"] = f"{path}\n{path}\n\n"

        installer = DependencyInstaller(ToolchainManager(options, engine), str(tmp_path))
        assert len(await installer.install()) == 1

    @pytest.mark.asyncio
    async def test_ambiguous_dependency_fails_install(self, engine, options, tmp_path):
        write_project(tmp_path, {"a": "^1.0", "b": "^1.0"})
        engine.npm_listings["a"] = add_module(tmp_path, "a")
        engine.npm_listings["b"] = "\n".join([
            add_module(tmp_path, "b"),
            add_module(tmp_path, "a/node_modules/b"),
        ])

        installer = DependencyInstaller(ToolchainManager(options, engine), str(tmp_path))
        with pytest.raises(AmbiguousDependencyError) as info:
            await installer.install()

        assert info.value.name == "b"
        assert len(info.value.paths) == 2
        assert make_calls(engine) == []

    @pytest.mark.asyncio
    async def test_inside_container_runs_make_directly(self, engine, docker_options, tmp_path):
        write_project(tmp_path, {"ugfx": "^1.0"})
        engine.npm_listings["ugfx"] = add_module(tmp_path, "ugfx")

        installer = DependencyInstaller(ToolchainManager(docker_options, engine), str(tmp_path))
        await installer.install()

        assert [c[0] for c in engine.commands] == ["npm", "make", "make"]

    @pytest.mark.asyncio
    async def test_first_failure_fails_install(self, engine, options, tmp_path):
        write_project(tmp_path, {"a": "^1.0", "b": "^1.0"})
        engine.npm_listings["a"] = add_module(tmp_path, "a")
        engine.npm_listings["b"] = add_module(tmp_path, "b")
        engine.failing.append(lambda c: c[-2:] == ["-C", "/mygame/node_modules/b/"])

        installer = DependencyInstaller(ToolchainManager(options, engine), str(tmp_path))
        with pytest.raises(ExecutionError):
            await installer.install()

    @pytest.mark.asyncio
    async def test_failed_lookup_fails_install(self, engine, options, tmp_path):
        write_project(tmp_path, {"missing": "^1.0"})
        engine.failing.append(lambda c: c[0] == "npm")

        installer = DependencyInstaller(ToolchainManager(options, engine), str(tmp_path))
        with pytest.raises(ExecutionError):
            await installer.install()


class ScriptedRunner(ProcessRunner):
    """
    Real process runner that answers npm lookups from a table and runs a
    Python script in place of each dependency's make.
    """
    def __init__(self, listings, scripts):
        super().__init__(name="scripted")
        self.listings = listings
        self.scripts = scripts

    async def run(self, command, cwd=None):
        if command[0] == "npm":
            return self.listings[command[2]]
        dependency = command[2].rstrip("/").rsplit("/", 1)[-1]
        return await super().run([sys.executable, "-c", self.scripts[dependency]], cwd=cwd)


class TestConcurrentInstallFailure:
    """A failing install stops the installs running beside it."""

    @pytest.mark.asyncio
    async def test_sibling_make_is_killed(self, docker_options, tmp_path):
        write_project(tmp_path, {"a": "^1.0", "b": "^1.0"})
        pid_file = tmp_path / "a.pid"
        listings = {"a": add_module(tmp_path, "a"), "b": add_module(tmp_path, "b")}
        scripts = {
            "a": textwrap.dedent(f"""
                import os, time
                with open({str(pid_file)!r} + ".tmp", "w") as f:
                    f.write(str(os.getpid()))
                os.replace({str(pid_file)!r} + ".tmp", {str(pid_file)!r})
                time.sleep(60)
            """),
            "b": textwrap.dedent(f"""
                import os, sys, time
                deadline = time.time() + 10
                while not os.path.exists({str(pid_file)!r}) and time.time() < deadline:
                    time.sleep(0.01)
                sys.exit(1)
            """),
        }
        runner = ScriptedRunner(listings, scripts)
        installer = DependencyInstaller(ToolchainManager(docker_options, runner), str(tmp_path))

        with pytest.raises(ExecutionError) as info:
            await installer.install()
        assert info.value.returncode == 1

        pid = int(pid_file.read_text())
        with pytest.raises(ProcessLookupError):
            os.kill(pid, 0)
