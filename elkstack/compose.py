"""docker-compose and docker image lifecycle calls."""

import logging
from typing import Iterable

from .context import StackContext
from .runner import CommandRunner
from .settings import ElkStackSettings

logger = logging.getLogger(__name__)


class ComposeClient:
    """Issue compose commands for one project.

    Every command carries the project prefix, and the compose environment
    (including COMPOSE_HTTP_TIMEOUT) from the context.
    """

    def __init__(
        self,
        context: StackContext,
        runner: CommandRunner,
        settings: ElkStackSettings,
    ):
        self.context = context
        self.runner = runner
        self.settings = settings

    def _command(self, compose_file: str | None = None) -> list[str]:
        cmd = [self.settings.compose_command, "-p", self.context.project_name]
        compose_file = compose_file or self.context.compose_file
        if compose_file:
            cmd.extend(["-f", compose_file])
        return cmd

    def _env(self, extra_env: dict[str, str] | None = None) -> dict[str, str]:
        env = self.context.compose_env()
        if extra_env:
            env.update(extra_env)
        return env

    def up(
        self,
        services: Iterable[str],
        compose_file: str | None = None,
        extra_env: dict[str, str] | None = None,
    ) -> None:
        """Start services detached.

        Args:
            services: Compose service names
            compose_file: Override the context's compose file
            extra_env: Variables interpolated into the compose file
        """
        cmd = self._command(compose_file) + ["up", "-d", *services]
        self.runner.stream(cmd, env=self._env(extra_env))

    def pull(self, compose_file: str | None = None) -> None:
        self.runner.stream(self._command(compose_file) + ["pull"], env=self._env())

    def build(self, services: Iterable[str] = (), compose_file: str | None = None) -> None:
        cmd = self._command(compose_file) + ["build", *services]
        self.runner.stream(cmd, env=self._env())

    def stop(self) -> None:
        self.runner.stream(self._command() + ["stop"], env=self._env())

    def rm(self) -> None:
        self.runner.stream(self._command() + ["rm", "-f"], env=self._env())

    def scale(self, counts: dict[str, int], extra_env: dict[str, str] | None = None) -> None:
        """Set the number of containers per service.

        Args:
            counts: Service name to replica count, e.g. {"elasticsearch": 3}
            extra_env: Additional variables for the compose file
        """
        cmd = self._command() + ["up", "-d", "--no-recreate"]
        for service, count in counts.items():
            cmd.extend(["--scale", f"{service}={count}"])
        cmd.extend(counts)
        self.runner.stream(cmd, env=self._env(extra_env))

    def tag_and_push(self, images: dict[str, str]) -> None:
        """Tag locally built images and push them to a registry.

        Args:
            images: Local image name to remote image name
        """
        for local, remote in images.items():
            logger.info(f"Publishing {local} as {remote}")
            self.runner.stream(["docker", "tag", local, remote])
            self.runner.stream(["docker", "push", remote])
