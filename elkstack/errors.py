"""
elkstack errors - everything the CLI turns into a non-zero exit.
"""


class ElkStackError(Exception):
    """Base exception for all elkstack errors."""
    pass


class ConfigurationError(ElkStackError):
    """Local tooling or account configuration is not usable.

    Attributes:
        help_url: Optional documentation link shown under the message
        details: Extra lines printed after the headline
    """

    def __init__(
        self,
        message: str,
        help_url: str | None = None,
        details: list[str] | None = None,
    ):
        super().__init__(message)
        self.help_url = help_url
        self.details = details or []


class ResolutionError(ElkStackError):
    """A container address or port lookup gave no usable answer."""
    pass


class UnsupportedLogType(ElkStackError):
    """Unknown log type passed to the test client dispatcher."""

    def __init__(self, logtype: str | None):
        super().__init__("logtype arguments required: gelf or syslog")
        self.logtype = logtype


class CommandError(ElkStackError):
    """An external tool exited with a non-zero status."""

    def __init__(self, command: list[str], returncode: int, stderr: str = ""):
        joined = " ".join(command)
        message = f"'{joined}' exited with status {returncode}"
        if stderr:
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr


class ReadinessTimeout(ElkStackError):
    """A readiness poll ran past its deadline."""
    pass
