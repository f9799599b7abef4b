"""
Pytest configuration and fixtures for elkstack tests.
"""

import json
import tempfile
from pathlib import Path

import pytest

from elkstack.context import StackContext
from elkstack.errors import CommandError
from elkstack.settings import ElkStackSettings


class FakeRunner:
    """CommandRunner stand-in returning canned output per command.

    Responses are keyed by the joined command line. A value that is an
    exception instance is raised instead of returned.
    """

    def __init__(self, responses=None, tools=("docker", "triton")):
        self.responses = dict(responses or {})
        self.tools = set(tools)
        self.calls = []
        self.streamed = []

    def available(self, tool):
        return tool in self.tools

    def run(self, args, env=None):
        key = " ".join(args)
        self.calls.append(key)
        if key not in self.responses:
            raise CommandError(list(args), 1, "no such container")
        value = self.responses[key]
        if isinstance(value, Exception):
            raise value
        if not isinstance(value, str):
            value = json.dumps(value)
        return value

    def run_json(self, args, env=None):
        output = self.run(args, env=env)
        try:
            return json.loads(output)
        except ValueError as e:
            raise CommandError(list(args), 0, str(e)) from e

    def stream(self, args, env=None):
        self.streamed.append((list(args), dict(env or {})))


@pytest.fixture
def temp_dir():
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def settings():
    return ElkStackSettings(
        project_name="elk",
        compose_file="",
        docker_host_ip=None,
        docker_machine="default",
        open_browser=False,
    )


@pytest.fixture
def remote_context():
    return StackContext.create(project_name="elk")


@pytest.fixture
def local_context():
    return StackContext.create(project_name="elk", compose_file="local-compose.yml")


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def make_runner():
    """Factory building a FakeRunner with canned responses."""
    return FakeRunner


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Keep the global settings singleton and compose variables per-test."""
    from elkstack import settings as settings_module

    for var in ("COMPOSE_PROJECT_NAME", "COMPOSE_FILE", "COMPOSE_HTTP_TIMEOUT"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(settings_module, "_settings", None)
    yield
