"""
Prerequisite checks for running the stack.

Local runs only need Docker. Triton runs also need the triton CLI, a Docker
client pointed at the same account and data center as that CLI, and Triton
CNS enabled on the account.
"""

import logging
import os
from typing import Any
from urllib.parse import urlparse

from .context import StackContext
from .errors import CommandError, ConfigurationError
from .runner import CommandRunner

logger = logging.getLogger(__name__)

DOCKER_DOCS_URL = "https://docs.joyent.com/public-cloud/api-access/docker"
TRITON_DOCS_URL = "https://www.joyent.com/blog/introducing-the-triton-command-line-tool"


def data_center(url: str | None) -> str:
    """First label of a URL's hostname.

    Example:
        >>> data_center("tcp://us-east-1.docker.joyent.com:2376")
        'us-east-1'
    """
    if not url:
        return ""
    hostname = urlparse(url).hostname or ""
    return hostname.split(".")[0]


def docker_account(info: dict[str, Any]) -> str:
    """Extract the SDCAccount entry from `docker info` JSON output."""
    for key in ("SystemStatus", "DriverStatus"):
        for pair in info.get(key) or []:
            if isinstance(pair, (list, tuple)) and len(pair) == 2 and pair[0] == "SDCAccount":
                return str(pair[1])
    return ""


def cns_enabled(account: dict[str, Any]) -> bool:
    for key, value in account.items():
        if "cns" in key.lower():
            return value is True or str(value).lower() == "true"
    return False


def _require(runner: CommandRunner, tool: str, message: str, help_url: str) -> None:
    if not runner.available(tool):
        raise ConfigurationError(message, help_url=help_url)


def check_environment(
    context: StackContext,
    runner: CommandRunner,
    docker_host: str | None = None,
) -> None:
    """Verify the local tooling can drive the target environment.

    Args:
        context: Deployment context; Triton checks run only in remote mode
        runner: Command runner used to query docker and triton
        docker_host: DOCKER_HOST value (defaults to the process environment)

    Raises:
        ConfigurationError: On the first failed prerequisite
    """
    _require(
        runner,
        "docker",
        "Docker is required, but does not appear to be installed.",
        DOCKER_DOCS_URL,
    )

    # Triton configuration is irrelevant for a local engine
    if context.is_local:
        logger.info("Local compose file given; skipping Triton checks")
        return

    _require(
        runner,
        "triton",
        "Error! Joyent Triton CLI is required, but does not appear to be installed.",
        TRITON_DOCS_URL,
    )

    try:
        info = runner.run_json(["docker", "info", "--format", "{{json .}}"])
        profile = runner.run_json(["triton", "profile", "get", "-j"])
        account = runner.run_json(["triton", "account", "get", "-j"])
    except CommandError as e:
        raise ConfigurationError(f"Error! Could not query Docker or Triton: {e}") from e

    if docker_host is None:
        docker_host = os.environ.get("DOCKER_HOST", "")

    docker_user = docker_account(info)
    triton_user = str(profile.get("account", ""))
    docker_dc = data_center(docker_host)
    triton_dc = data_center(profile.get("url"))

    if docker_user != triton_user or docker_dc != triton_dc:
        raise ConfigurationError(
            "Error! The Triton CLI configuration does not match the Docker CLI configuration.",
            details=[
                f"Docker user: {docker_user}",
                f"Triton user: {triton_user}",
                f"Docker data center: {docker_dc}",
                f"Triton data center: {triton_dc}",
            ],
        )

    if not cns_enabled(account):
        raise ConfigurationError("Error! Triton CNS is required and not enabled.")
