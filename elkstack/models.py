"""
Value types shared by the address resolver, the poller and the stack commands.

All of these are short-lived: built at a call site, used once, discarded.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .errors import UnsupportedLogType


class DeploymentMode(str, Enum):
    """Where the stack runs: Triton cloud or a local Docker engine."""

    REMOTE = "remote"
    LOCAL = "local"


class Protocol(str, Enum):
    TCP = "tcp"
    UDP = "udp"


class LogType(str, Enum):
    """Log transports the Nginx test client can ship with.

    Triton also supports fluentd, but the Logstash fluent codec is broken
    upstream (logstash-plugins/logstash-codec-fluent#2), so it stays out of
    this list.
    """

    GELF = "gelf"
    SYSLOG = "syslog"


class ServiceRef(BaseModel):
    """A port on a logical compose service.

    Attributes:
        name: Compose service name (e.g., "kibana", "nginx_gelf")
        port: Container-internal port
        protocol: Transport protocol of the port (default: tcp)

    Example:
        >>> ServiceRef(name="logstash", port=12201, protocol="udp")
    """

    model_config = ConfigDict(frozen=True)

    name: str
    port: int = Field(ge=1, le=65535)
    protocol: Protocol = Protocol.TCP

    @property
    def port_key(self) -> str:
        """Key used by Docker's port map, e.g. "12201/udp"."""
        return f"{self.port}/{self.protocol.value}"


class ResolvedAddress(BaseModel):
    """A reachable host and port for a service."""

    model_config = ConfigDict(frozen=True)

    host: str
    port: int

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"

    def url(self, path: str = "") -> str:
        """Build an http URL pointing at this address.

        Args:
            path: Path (and optional fragment) appended verbatim

        Returns:
            URL string such as "http://10.0.0.5:5601/app/kibana#discover"
        """
        return f"http://{self}{path}"


class PollTarget(BaseModel):
    """A page to wait for, with the messages shown around the wait."""

    url: str
    waiting_message: str
    ready_message: str


# Port each log transport is received on by Logstash
LOG_PORTS: dict[LogType, tuple[int, Protocol]] = {
    LogType.GELF: (12201, Protocol.UDP),
    LogType.SYSLOG: (514, Protocol.TCP),
}


def log_target(logtype: str | None) -> ServiceRef:
    """Map a log type name to the Logstash port that receives it.

    Args:
        logtype: "gelf" or "syslog"

    Returns:
        ServiceRef for the logstash service

    Raises:
        UnsupportedLogType: For any other value, including None
    """
    try:
        kind = LogType(logtype)
    except ValueError:
        raise UnsupportedLogType(logtype) from None
    port, protocol = LOG_PORTS[kind]
    return ServiceRef(name="logstash", port=port, protocol=protocol)
