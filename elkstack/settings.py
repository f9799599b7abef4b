"""
elkstack Settings - Configuration management using Pydantic Settings.

Loads configuration from environment variables and .env files. The standard
docker-compose variables (COMPOSE_PROJECT_NAME, COMPOSE_FILE,
COMPOSE_HTTP_TIMEOUT) are honoured alongside their ELK_ prefixed forms.
"""

from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Find project root (where .env file is located)
PROJECT_ROOT = Path(__file__).parent.parent


class ElkStackSettings(BaseSettings):
    """
    elkstack configuration settings.

    Settings are loaded from:
    1. Environment variables (highest priority)
    2. .env file in current directory
    3. Default values (lowest priority)
    """

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="ELK_",
        populate_by_name=True,
    )

    # docker-compose configuration
    project_name: str = Field(
        default="elk",
        description="Prefix for compose project and container names (env: COMPOSE_PROJECT_NAME)",
        validation_alias=AliasChoices("COMPOSE_PROJECT_NAME", "ELK_PROJECT_NAME"),
    )

    compose_file: str = Field(
        default="",
        description="Compose file for a local Docker engine; empty targets Triton (env: COMPOSE_FILE)",
        validation_alias=AliasChoices("COMPOSE_FILE", "ELK_COMPOSE_FILE"),
    )

    http_timeout: int = Field(
        default=300,
        description="Seconds the compose client waits on the Docker remote API (env: COMPOSE_HTTP_TIMEOUT)",
        validation_alias=AliasChoices("COMPOSE_HTTP_TIMEOUT", "ELK_HTTP_TIMEOUT"),
    )

    compose_command: str = Field(
        default="docker-compose",
        description="Executable used for compose lifecycle calls (env: ELK_COMPOSE_COMMAND)",
    )

    local_compose_file: str = Field(
        default="local-compose.yml",
        description="Compose file used by the build and local flows (env: ELK_LOCAL_COMPOSE_FILE)",
    )

    test_compose_file: str = Field(
        default="test-compose.yml",
        description="Compose file defining the nginx_<logtype> log sources (env: ELK_TEST_COMPOSE_FILE)",
    )

    nginx_dir: Path = Field(
        default=Path("nginx"),
        description="Directory holding containerbuddy.json and nginx.conf (env: ELK_NGINX_DIR)",
    )

    # Local address resolution
    docker_machine: str = Field(
        default="default",
        description="docker-machine name whose IP fronts local containers (env: ELK_DOCKER_MACHINE)",
    )

    docker_host_ip: str | None = Field(
        default=None,
        description="Fixed local Docker host IP; skips docker-machine when set (env: ELK_DOCKER_HOST_IP)",
    )

    # Readiness polling
    poll_interval: float = Field(
        default=1.0,
        description="Seconds between readiness probes (env: ELK_POLL_INTERVAL)",
    )

    probe_timeout: float = Field(
        default=2.0,
        description="Timeout of a single readiness probe in seconds (env: ELK_PROBE_TIMEOUT)",
    )

    max_wait: float | None = Field(
        default=None,
        description="Give up polling after this many seconds; unset waits forever (env: ELK_MAX_WAIT)",
    )

    open_browser: bool = Field(
        default=True,
        description="Open each page once it responds (env: ELK_OPEN_BROWSER)",
    )

    # Image publishing
    image_repository: str = Field(
        default="0x74696d",
        description="Registry namespace used by 'ship' (env: ELK_IMAGE_REPOSITORY)",
    )

    # Logging Configuration
    log_level: str = Field(
        default="WARNING",
        description="Logging level (DEBUG, INFO, WARNING, ERROR) (env: ELK_LOG_LEVEL)",
    )


# Global settings instance
_settings: ElkStackSettings | None = None


def get_settings() -> ElkStackSettings:
    """
    Get the global settings instance.

    Creates the settings instance on first call, then returns cached instance.

    Returns:
        ElkStackSettings instance
    """
    global _settings
    if _settings is None:
        _settings = ElkStackSettings()
    return _settings


def reload_settings() -> ElkStackSettings:
    """
    Reload settings from environment/files.

    Useful for testing or when .env file changes.

    Returns:
        Fresh ElkStackSettings instance
    """
    global _settings
    _settings = ElkStackSettings()
    return _settings
