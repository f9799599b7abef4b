"""
elkstack - run and verify an ELK logging stack with Consul and an Nginx log source.

Targets Joyent Triton by default, or a local Docker engine when a compose file
is given. Finds where each service landed, waits for its web page to answer,
and opens it.
"""

from .context import StackContext, select_mode
from .models import DeploymentMode, PollTarget, ResolvedAddress, ServiceRef, log_target
from .poller import ReadinessPoller
from .resolver import ServiceAddressResolver
from .settings import ElkStackSettings, get_settings, reload_settings
from .stack import ElkStack

__version__ = "0.1.0"
__all__ = [
    "DeploymentMode",
    "ElkStack",
    "ElkStackSettings",
    "PollTarget",
    "ReadinessPoller",
    "ResolvedAddress",
    "ServiceAddressResolver",
    "ServiceRef",
    "StackContext",
    "get_settings",
    "log_target",
    "reload_settings",
    "select_mode",
]
