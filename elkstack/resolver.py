"""
Service address resolution for remote (Triton) and local Docker deployments.

Given a compose service and one of its container ports, work out a host:port
pair that can be reached from this machine (resolve) or from another
container on the same engine (resolve_private). Every call queries the
engine or cloud afresh; containers move between runs and results are never
cached.
"""

import logging
import re
from typing import Any

from .context import StackContext
from .errors import CommandError, ResolutionError
from .models import DeploymentMode, ResolvedAddress, ServiceRef
from .runner import CommandRunner
from .settings import ElkStackSettings

logger = logging.getLogger(__name__)

INET_PATTERN = re.compile(r"\binet\s+(\d{1,3}(?:\.\d{1,3}){3})")


class ServiceAddressResolver:
    """Find where a compose service's port can be reached.

    Remote mode asks the Triton CLI for the instance's IP list and uses the
    published container port directly. Local mode uses the single docker
    host address and looks up the host port Docker mapped the container
    port to.

    Attributes:
        context: Deployment mode and project prefix
        runner: Executes docker / docker-machine / triton
        settings: Local host overrides (docker_host_ip, docker_machine)
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

    def resolve(self, service: ServiceRef) -> ResolvedAddress:
        """Resolve the externally reachable address of a service.

        Args:
            service: Service name, container port and protocol

        Returns:
            ResolvedAddress usable from this machine

        Raises:
            ResolutionError: If the lookup fails or returns nothing usable
        """
        if self.context.mode is DeploymentMode.REMOTE:
            host = self._remote_ip(service.name)
        else:
            host = self._local_host_ip()
        address = ResolvedAddress(host=host, port=self.mapped_port(service))
        logger.info(f"Resolved {service.name}:{service.port_key} to {address}")
        return address

    def resolve_private(self, service: ServiceRef) -> ResolvedAddress:
        """Resolve a service's address on the container network.

        Used to hand one container the address of another. The IP comes from
        eth0 inside the container; the port follows the same rule as resolve().
        """
        instance = self.context.instance_name(service.name)
        output = self._query(
            ["docker", "exec", instance, "ip", "-o", "-4", "addr", "show", "eth0"],
            instance,
        )
        match = INET_PATTERN.search(output)
        if not match:
            raise ResolutionError(f"no eth0 address found for {instance}")
        address = ResolvedAddress(host=match.group(1), port=self.mapped_port(service))
        logger.info(f"Resolved private {service.name}:{service.port_key} to {address}")
        return address

    def mapped_port(self, service: ServiceRef) -> int:
        """Port to dial for a service's container port.

        Remote instances expose the container port as-is. Locally the
        smallest host port mapped to it wins, so that scaled services
        resolve to the same replica every time.
        """
        if self.context.mode is DeploymentMode.REMOTE:
            return service.port

        instance = self.context.instance_name(service.name)
        data = self._query_json(["docker", "inspect", instance], instance)
        if isinstance(data, list):
            data = data[0] if data else {}
        if not isinstance(data, dict):
            raise ResolutionError(f"unexpected inspect output for {instance}")

        ports = (data.get("NetworkSettings") or {}).get("Ports") or {}
        candidates = []
        for mapping in ports.get(service.port_key) or []:
            try:
                candidates.append(int(mapping["HostPort"]))
            except (KeyError, TypeError, ValueError):
                continue

        if not candidates:
            raise ResolutionError("no mapped port found")
        return min(candidates)

    def _remote_ip(self, service_name: str) -> str:
        # Triton lists the private interface first; the second address
        # is the public one.
        instance = self.context.instance_name(service_name)
        data = self._query_json(["triton", "instance", "get", "-j", instance], instance)
        ips = data.get("ips") if isinstance(data, dict) else None
        if not isinstance(ips, list) or len(ips) < 2:
            raise ResolutionError(f"no public IP listed for {instance}")
        return str(ips[1])

    def _local_host_ip(self) -> str:
        if self.settings.docker_host_ip:
            return self.settings.docker_host_ip
        output = self._query(
            ["docker-machine", "ip", self.settings.docker_machine],
            self.settings.docker_machine,
        )
        return output.splitlines()[0].strip()

    def _query(self, args: list[str], subject: str) -> str:
        try:
            output = self.runner.run(args)
        except CommandError as e:
            raise ResolutionError(f"lookup for {subject} failed: {e}") from e
        if not output:
            raise ResolutionError(f"lookup for {subject} returned no output")
        return output

    def _query_json(self, args: list[str], subject: str) -> Any:
        try:
            data = self.runner.run_json(args)
        except CommandError as e:
            raise ResolutionError(f"lookup for {subject} failed: {e}") from e
        if not data:
            raise ResolutionError(f"lookup for {subject} returned no output")
        return data
