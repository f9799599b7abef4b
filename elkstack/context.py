"""Deployment context: which engine the stack targets and how it is named.

The context is built once from settings and CLI flags and handed to every
component explicitly; nothing reads the mode back out of the environment.
"""

from pydantic import BaseModel, ConfigDict

from .models import DeploymentMode
from .settings import ElkStackSettings


def select_mode(compose_file: str | None) -> DeploymentMode:
    """Pick the deployment mode from the compose file flag.

    Args:
        compose_file: Explicit compose file path, or None/"" when not given

    Returns:
        DeploymentMode.LOCAL when a file was named, DeploymentMode.REMOTE otherwise

    Example:
        >>> select_mode("")
        <DeploymentMode.REMOTE: 'remote'>
        >>> select_mode("local-compose.yml")
        <DeploymentMode.LOCAL: 'local'>
    """
    if compose_file:
        return DeploymentMode.LOCAL
    return DeploymentMode.REMOTE


class StackContext(BaseModel):
    """Immutable per-process configuration for one stack.

    Attributes:
        mode: Remote (Triton) or local Docker engine
        project_name: Compose project prefix for all container names
        compose_file: Compose file for local mode ("" in remote mode)
        http_timeout: Compose client timeout against the Docker API
    """

    model_config = ConfigDict(frozen=True)

    mode: DeploymentMode
    project_name: str
    compose_file: str = ""
    http_timeout: int = 300

    @classmethod
    def create(
        cls,
        project_name: str,
        compose_file: str | None = None,
        http_timeout: int = 300,
    ) -> "StackContext":
        return cls(
            mode=select_mode(compose_file),
            project_name=project_name,
            compose_file=compose_file or "",
            http_timeout=http_timeout,
        )

    @classmethod
    def from_settings(
        cls,
        settings: ElkStackSettings,
        compose_file: str | None = None,
        project_name: str | None = None,
    ) -> "StackContext":
        """Build a context from settings, letting CLI flags win."""
        return cls.create(
            project_name=project_name or settings.project_name,
            compose_file=compose_file if compose_file is not None else settings.compose_file,
            http_timeout=settings.http_timeout,
        )

    @property
    def is_local(self) -> bool:
        return self.mode is DeploymentMode.LOCAL

    def instance_name(self, service: str) -> str:
        """Name of the first container compose creates for a service."""
        return f"{self.project_name}_{service}_1"

    def compose_env(self) -> dict[str, str]:
        return {
            "COMPOSE_PROJECT_NAME": self.project_name,
            "COMPOSE_FILE": self.compose_file,
            "COMPOSE_HTTP_TIMEOUT": str(self.http_timeout),
        }
