"""Tests for ElkStack commands with fake collaborators."""

from io import StringIO
from unittest.mock import Mock, call

import pytest
from rich.console import Console

from elkstack.compose import ComposeClient
from elkstack.errors import CommandError, ConfigurationError, UnsupportedLogType
from elkstack.models import ResolvedAddress, ServiceRef
from elkstack.poller import ReadinessPoller
from elkstack.resolver import ServiceAddressResolver
from elkstack.settings import ElkStackSettings
from elkstack.stack import CORE_ENV, CORE_SERVICES, ElkStack


@pytest.fixture
def nginx_dir(temp_dir):
    (temp_dir / "containerbuddy.json").write_text('{"consul": "{{ .CONSUL }}"}')
    (temp_dir / "nginx.conf").write_text("events {}")
    return temp_dir


@pytest.fixture
def collaborators():
    resolver = Mock(spec=ServiceAddressResolver)
    resolver.resolve.side_effect = lambda ref: ResolvedAddress(host="165.225.170.10", port=ref.port)
    resolver.resolve_private.side_effect = lambda ref: ResolvedAddress(host="192.168.128.4", port=ref.port)
    return {
        "resolver": resolver,
        "poller": Mock(spec=ReadinessPoller),
        "compose": Mock(spec=ComposeClient),
        "console": Console(file=StringIO()),
    }


def make_stack(context, nginx_dir, collaborators, **overrides):
    settings = ElkStackSettings(nginx_dir=nginx_dir, open_browser=False, **overrides)
    return ElkStack(context, settings, **collaborators)


def polled_urls(poller):
    return [c.args[0].url for c in poller.wait_until_ready.call_args_list]


class TestShow:
    def test_polls_consul_then_kibana(self, remote_context, nginx_dir, collaborators):
        stack = make_stack(remote_context, nginx_dir, collaborators)

        stack.show()

        assert polled_urls(collaborators["poller"]) == [
            "http://165.225.170.10:8500/ui/",
            "http://165.225.170.10:5601/app/kibana#discover",
        ]

    def test_passes_max_wait(self, remote_context, nginx_dir, collaborators):
        stack = make_stack(remote_context, nginx_dir, collaborators, max_wait=90)

        stack.show()

        kwargs = collaborators["poller"].wait_until_ready.call_args.kwargs
        assert kwargs["max_wait"] == 90


class TestTestClient:
    def test_gelf_wiring(self, remote_context, nginx_dir, collaborators):
        stack = make_stack(remote_context, nginx_dir, collaborators)

        stack.test("gelf")

        resolver = collaborators["resolver"]
        assert resolver.resolve_private.call_args_list == [
            call(ServiceRef(name="consul", port=8500)),
            call(ServiceRef(name="logstash", port=12201, protocol="udp")),
        ]
        compose = collaborators["compose"]
        compose.up.assert_called_once()
        services = compose.up.call_args.args[0]
        kwargs = compose.up.call_args.kwargs
        assert services == ["nginx_gelf"]
        assert kwargs["compose_file"] == "test-compose.yml"
        assert kwargs["extra_env"] == {
            "CONSUL": "192.168.128.4:8500",
            "LOGSTASH": "192.168.128.4:12201",
            "CONTAINERBUDDY": '{"consul": "{{ .CONSUL }}"}',
            "NGINX_CONF": "events {}",
        }
        assert polled_urls(collaborators["poller"]) == ["http://165.225.170.10:80"]

    def test_syslog_uses_tcp_514(self, remote_context, nginx_dir, collaborators):
        stack = make_stack(remote_context, nginx_dir, collaborators)

        stack.test("syslog")

        logstash_ref = collaborators["resolver"].resolve_private.call_args_list[1].args[0]
        assert logstash_ref == ServiceRef(name="logstash", port=514, protocol="tcp")

    @pytest.mark.parametrize("logtype", ["fluentd", None, "bogus"])
    def test_unsupported_logtype(self, remote_context, nginx_dir, collaborators, logtype):
        stack = make_stack(remote_context, nginx_dir, collaborators)

        with pytest.raises(UnsupportedLogType):
            stack.test(logtype)

        collaborators["compose"].up.assert_not_called()

    def test_missing_nginx_files(self, remote_context, temp_dir, collaborators):
        stack = make_stack(remote_context, temp_dir, collaborators)

        with pytest.raises(ConfigurationError, match="containerbuddy.json"):
            stack.test("syslog")


class TestRun:
    def test_run_starts_core_services(self, remote_context, nginx_dir, collaborators):
        stack = make_stack(remote_context, nginx_dir, collaborators)

        stack.run("gelf")

        compose = collaborators["compose"]
        assert compose.up.call_args_list[0] == call(CORE_SERVICES, extra_env={"LOGSTASH": "n/a"})
        assert len(polled_urls(collaborators["poller"])) == 3

    def test_local_ignores_cleanup_failures(self, local_context, nginx_dir, collaborators):
        compose = collaborators["compose"]
        compose.stop.side_effect = CommandError(["docker-compose", "stop"], 1)
        compose.rm.side_effect = CommandError(["docker-compose", "rm", "-f"], 1)
        stack = make_stack(local_context, nginx_dir, collaborators)

        stack.local("syslog")

        compose.pull.assert_called_once()
        compose.build.assert_called_once()
        assert compose.up.call_args_list[0] == call(CORE_SERVICES, extra_env={"LOGSTASH": "n/a"})


class TestReleaseFlows:
    def test_build(self, remote_context, nginx_dir, collaborators):
        make_stack(remote_context, nginx_dir, collaborators).build()

        collaborators["compose"].build.assert_called_once_with(
            ["kibana", "logstash"], compose_file="local-compose.yml"
        )

    def test_ship(self, remote_context, nginx_dir, collaborators):
        make_stack(remote_context, nginx_dir, collaborators).ship()

        collaborators["compose"].tag_and_push.assert_called_once_with(
            {
                "elk_kibana": "0x74696d/triton-kibana",
                "elk_logstash": "0x74696d/triton-logstash",
            }
        )

    def test_scale(self, remote_context, nginx_dir, collaborators):
        make_stack(remote_context, nginx_dir, collaborators).scale()

        collaborators["compose"].scale.assert_called_once_with(
            {"elasticsearch": 3, "kibana": 2}, extra_env=CORE_ENV
        )


def test_end_to_end_local_resolution(local_context, nginx_dir, make_runner):
    """Real resolver and poller against canned docker output."""
    runner = make_runner(
        {
            "docker-machine ip default": "192.168.99.100",
            "docker inspect elk_consul_1": [
                {"NetworkSettings": {"Ports": {"8500/tcp": [{"HostPort": "32770"}, {"HostPort": "32768"}]}}}
            ],
            "docker inspect elk_kibana_1": [
                {"NetworkSettings": {"Ports": {"5601/tcp": [{"HostPort": "32771"}]}}}
            ],
        }
    )
    settings = ElkStackSettings(nginx_dir=nginx_dir, open_browser=False)
    probed = []
    poller = ReadinessPoller(probe=lambda url: probed.append(url) or True, opener=None, sleep=Mock())
    stack = ElkStack(local_context, settings, runner=runner, poller=poller, console=Console(file=StringIO()))

    stack.show()

    assert probed == [
        "http://192.168.99.100:32768/ui/",
        "http://192.168.99.100:32771/app/kibana#discover",
    ]
