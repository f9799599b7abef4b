"""
ElkStack - the top-level stack commands.

Wires together the compose client, the address resolver and the readiness
poller to bring the ELK stack up, open its consoles, and start an Nginx
container that ships its logs to Logstash.
"""

import logging
import webbrowser
from pathlib import Path

from rich.console import Console

from .compose import ComposeClient
from .context import StackContext
from .errors import CommandError, ConfigurationError
from .models import PollTarget, ServiceRef, log_target
from .poller import ReadinessPoller
from .resolver import ServiceAddressResolver
from .runner import CommandRunner
from .settings import ElkStackSettings

logger = logging.getLogger(__name__)

CORE_SERVICES = ["elasticsearch", "elasticsearch_master", "kibana", "logstash"]
BUILT_SERVICES = ["kibana", "logstash"]

# The compose file interpolates $LOGSTASH for the test clients; the core
# services only need it defined.
CORE_ENV = {"LOGSTASH": "n/a"}


class ElkStack:
    """Commands operating on one deployed stack.

    All collaborators are injected so the commands can be driven with fakes.

    Attributes:
        context: Deployment mode and project prefix
        settings: File locations, polling and publishing options
        compose: docker-compose lifecycle calls
        resolver: Service address lookups
        poller: Readiness polling
        console: Where progress messages go
    """

    def __init__(
        self,
        context: StackContext,
        settings: ElkStackSettings,
        runner: CommandRunner | None = None,
        resolver: ServiceAddressResolver | None = None,
        poller: ReadinessPoller | None = None,
        compose: ComposeClient | None = None,
        console: Console | None = None,
    ):
        self.context = context
        self.settings = settings
        runner = runner or CommandRunner()
        self.compose = compose or ComposeClient(context, runner, settings)
        self.resolver = resolver or ServiceAddressResolver(context, runner, settings)
        self.poller = poller or ReadinessPoller(
            interval=settings.poll_interval,
            probe_timeout=settings.probe_timeout,
            opener=webbrowser.open if settings.open_browser else None,
        )
        self.console = console or Console()

    # ------------------------------------------------------------------
    # Top-level commands

    def run(self, logtype: str = "syslog") -> None:
        """Start the stack, open its consoles and run a test client."""
        self.compose.up(CORE_SERVICES, extra_env=CORE_ENV)
        self.show()
        self.test(logtype)

    def show(self) -> None:
        """Wait for Consul and Kibana and open their web pages."""
        consul = self.resolver.resolve(ServiceRef(name="consul", port=8500))
        self.wait_for_page(
            PollTarget(
                url=consul.url("/ui/"),
                waiting_message="Waiting for Consul...",
                ready_message="Opening Consul console... Refresh the page to watch services register.",
            )
        )

        kibana = self.resolver.resolve(ServiceRef(name="kibana", port=5601))
        self.wait_for_page(
            PollTarget(
                url=kibana.url("/app/kibana#discover"),
                waiting_message="Waiting for Kibana to register as healthy...",
                ready_message="Opening Kibana console.",
            )
        )

    def test(self, logtype: str | None) -> None:
        """Start an Nginx log source shipping logs to Logstash.

        Args:
            logtype: "gelf" or "syslog"

        Raises:
            UnsupportedLogType: For any other log type
            ConfigurationError: If the Nginx config files are missing
        """
        logstash_ref = log_target(logtype)
        service = f"nginx_{logtype}"

        self.console.print("Starting Nginx log source...")
        consul = self.resolver.resolve_private(ServiceRef(name="consul", port=8500))
        logstash = self.resolver.resolve_private(logstash_ref)
        env = {
            "CONSUL": str(consul),
            "LOGSTASH": str(logstash),
            "CONTAINERBUDDY": self._read_nginx_file("containerbuddy.json"),
            "NGINX_CONF": self._read_nginx_file("nginx.conf"),
        }
        self.compose.up([service], compose_file=self.settings.test_compose_file, extra_env=env)

        nginx = self.resolver.resolve(ServiceRef(name=service, port=80))
        self.wait_for_page(
            PollTarget(
                url=nginx.url(),
                waiting_message="Waiting for Nginx to register as healthy...",
                ready_message="Opening web page.",
            )
        )

    # ------------------------------------------------------------------
    # Build and release flows

    def build(self) -> None:
        """Build the Kibana and Logstash images from the local compose file."""
        self.compose.build(BUILT_SERVICES, compose_file=self.settings.local_compose_file)

    def ship(self) -> None:
        """Tag the built images and push them to the image repository."""
        prefix = self.context.project_name
        repository = self.settings.image_repository
        self.compose.tag_and_push(
            {
                f"{prefix}_{service}": f"{repository}/triton-{service}"
                for service in BUILT_SERVICES
            }
        )

    def scale(self, elasticsearch: int = 3, kibana: int = 2) -> None:
        self.compose.scale(
            {"elasticsearch": elasticsearch, "kibana": kibana}, extra_env=CORE_ENV
        )

    def local(self, logtype: str = "syslog") -> None:
        """Replace any running stack with a freshly built local one."""
        for step in (self.compose.stop, self.compose.rm):
            try:
                step()
            except CommandError as e:
                logger.info(f"Ignoring cleanup failure: {e}")
        self.compose.pull()
        self.compose.build()
        self.run(logtype)

    # ------------------------------------------------------------------
    # Helpers

    def wait_for_page(self, target: PollTarget) -> None:
        self.poller.wait_until_ready(
            target,
            on_waiting=self.console.print,
            on_ready=self._ready,
            on_retry=lambda: self.console.print(".", end=""),
            max_wait=self.settings.max_wait,
        )

    def _ready(self, message: str) -> None:
        self.console.print()
        self.console.print(message)

    def _read_nginx_file(self, name: str) -> str:
        path = Path(self.settings.nginx_dir) / name
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise ConfigurationError(
                f"Error! Nginx configuration file not found: {path}"
            ) from None
