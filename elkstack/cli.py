"""
elkstack CLI - run and verify the ELK logging stack on Triton or local Docker.
"""

import logging
from typing import Callable

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from typer.core import TyperGroup

from .checks import check_environment
from .context import StackContext
from .errors import ConfigurationError, ElkStackError, UnsupportedLogType
from .runner import CommandRunner
from .settings import get_settings
from .stack import ElkStack

# Shell convention for "command not found"; an unknown subcommand shows help
HELP_EXIT_CODE = 127

USAGE = """\
Usage: elkstack [-f docker-compose.yml] [-p project] [args]

Optional args
  run:            [default] starts up the entire stack and runs the test clients.
  check:          verify your local environment is correctly configured.
  show:           open web pages of an already running stack.
  test <logtype>: run test client against an already running stack. logtype
                  should be one of: syslog, gelf
  scale:          scale out Elasticsearch data nodes and Kibana app instances.
  build:          build the Kibana and Logstash images locally.
  ship:           tag and push the locally built images.
  local:          rebuild and run the stack against a local Docker engine.
  help            help. you are reading it now.

Optional flags:
  -f <filename>   use this file as the docker-compose config file
  -p <project>    use this name as the project prefix for docker-compose
"""


class StackGroup(TyperGroup):
    """Command group that treats an unknown subcommand as a request for help."""

    def resolve_command(self, ctx: typer.Context, args: list[str]):
        if args and self.get_command(ctx, args[0]) is None:
            console.print(USAGE, markup=False, highlight=False, soft_wrap=True)
            ctx.exit(HELP_EXIT_CODE)
        return super().resolve_command(ctx, args)


# Setup
app = typer.Typer(
    name="elkstack",
    help="Run and verify the ELK logging stack on Triton or a local Docker engine",
    add_completion=False,
    cls=StackGroup,
)
console = Console()
err_console = Console(stderr=True)


def configure_logging():
    """Configure logging based on settings."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


# Configure logging on module import
configure_logging()


def _print_configuration_error(e: ConfigurationError) -> None:
    err_console.print()
    err_console.print(str(e), style="reverse bold", markup=False, soft_wrap=True)
    if e.help_url:
        err_console.print(f"See {e.help_url}", markup=False)
    if e.details:
        err_console.print()
        for line in e.details:
            err_console.print(line, markup=False, soft_wrap=True)


def _handle_error(e: ElkStackError) -> None:
    """Report an error and exit non-zero.

    Raises:
        typer.Exit: Always, with code 1
    """
    if isinstance(e, UnsupportedLogType):
        err_console.print(str(e), markup=False)
    elif isinstance(e, ConfigurationError):
        _print_configuration_error(e)
    else:
        err_console.print(f"[bold red]✗ Error:[/bold red] {escape(str(e))}")
    raise typer.Exit(code=1)


def _execute(context: StackContext, action: Callable[[ElkStack], None]) -> None:
    """Build the stack for a context and run one command against it."""
    stack = ElkStack(context, get_settings(), runner=CommandRunner(), console=console)
    try:
        action(stack)
    except ElkStackError as e:
        _handle_error(e)


def _check(context: StackContext) -> None:
    try:
        check_environment(context, CommandRunner())
    except ElkStackError as e:
        _handle_error(e)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    compose_file: str = typer.Option(
        None, "-f", "--file", help="Use this file as the docker-compose config file"
    ),
    project: str = typer.Option(
        None, "-p", "--project", help="Use this name as the project prefix for docker-compose"
    ),
):
    """Start the whole stack and the test clients when no command is given."""
    context = StackContext.from_settings(
        get_settings(), compose_file=compose_file, project_name=project
    )
    ctx.obj = context
    if ctx.invoked_subcommand is not None:
        return

    _check(context)
    console.print(
        Panel.fit(
            "[bold blue]Starting example application[/bold blue]\n"
            f"project prefix:      {context.project_name}\n"
            f"docker-compose file: {context.compose_file}",
            border_style="blue",
        )
    )
    _execute(context, lambda stack: stack.run())


@app.command()
def run(
    ctx: typer.Context,
    logtype: str = typer.Option("syslog", "--logtype", help="Test client log type: gelf or syslog"),
):
    """Start the entire stack and run the test clients."""
    _execute(ctx.obj, lambda stack: stack.run(logtype))


@app.command()
def check(ctx: typer.Context):
    """Verify the local environment is correctly configured."""
    _check(ctx.obj)
    console.print("[bold green]✓ Environment looks good[/bold green]")


@app.command()
def show(ctx: typer.Context):
    """Open the web pages of an already running stack."""
    _execute(ctx.obj, lambda stack: stack.show())


@app.command()
def test(
    ctx: typer.Context,
    logtype: str = typer.Argument(None, help="Log type to ship: gelf or syslog"),
):
    """Run a test client against an already running stack."""
    _execute(ctx.obj, lambda stack: stack.test(logtype))


@app.command()
def scale(
    ctx: typer.Context,
    elasticsearch: int = typer.Option(3, "--elasticsearch", help="Elasticsearch data nodes"),
    kibana: int = typer.Option(2, "--kibana", help="Kibana app instances"),
):
    """Scale out Elasticsearch data nodes and Kibana app instances."""
    _execute(ctx.obj, lambda stack: stack.scale(elasticsearch=elasticsearch, kibana=kibana))


@app.command()
def build(ctx: typer.Context):
    """Build the Kibana and Logstash images locally."""
    _execute(ctx.obj, lambda stack: stack.build())


@app.command()
def ship(ctx: typer.Context):
    """Tag and push the locally built images."""
    _execute(ctx.obj, lambda stack: stack.ship())


@app.command()
def local(
    ctx: typer.Context,
    logtype: str = typer.Option("syslog", "--logtype", help="Test client log type: gelf or syslog"),
):
    """Rebuild and run the stack against a local Docker engine."""
    context: StackContext = ctx.obj
    if not context.is_local:
        context = StackContext.create(
            project_name=context.project_name,
            compose_file=get_settings().local_compose_file,
            http_timeout=context.http_timeout,
        )
    _check(context)
    _execute(context, lambda stack: stack.local(logtype))


@app.command(name="help")
def help_cmd():
    """Show usage. You are reading it now."""
    console.print(USAGE, markup=False, highlight=False, soft_wrap=True)


@app.command()
def version():
    """Show elkstack version."""
    from . import __version__

    console.print(f"elkstack version: [bold]{__version__}[/bold]")


if __name__ == "__main__":
    app()
