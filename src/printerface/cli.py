__license__ = "GNU Affero General Public License http://www.gnu.org/licenses/agpl.html"
__copyright__ = "Copyright (C) 2024 The Printerface Project - Released under terms of the AGPLv3 License"

import click

from printerface import __version__, init_logging
from printerface.connection import Connection, SocketTimeout
from printerface.exceptions import ConfigurationError, PrinterfaceException
from printerface.push import JobPushRelay
from printerface.settings import load_settings
from printerface.tracker import JobTracker


class PrinterfaceContext:
    """Custom context holding the configured connection and tracker."""

    def __init__(self, connection=None, tracker=None):
        self.connection = connection
        self.tracker = tracker


def bulk_options(options):
    """
    Utility decorator to decorate a function with a list of click decorators.

    The provided list of ``options`` will be reversed to ensure correct
    processing order (inverse from what would be intuitive).
    """

    def decorator(f):
        for option in reversed(options):
            option(f)
        return f

    return decorator


client_options = bulk_options(
    [
        click.option("--apikey", "-a", type=click.STRING),
        click.option("--host", "-h", type=click.STRING),
        click.option("--port", "-p", type=click.INT),
        click.option("--httpuser", type=click.STRING),
        click.option("--httppass", type=click.STRING),
        click.option("--https", is_flag=True, default=None),
        click.option("--prefix", type=click.STRING),
        click.option("--timeout", type=float, help="Request timeout in seconds"),
    ]
)
"""Common options to configure the server connection."""


def create_tracker(settings):
    connection = Connection.from_settings(settings)
    return connection, JobTracker(connection)


@click.group(context_settings={"help_option_names": ["--help"]})
@click.option(
    "--config",
    "-c",
    "configfile",
    type=click.Path(dir_okay=False),
    help="Specify the config file to use.",
)
@click.option(
    "--verbose",
    "-v",
    "verbosity",
    count=True,
    help="Increase logging verbosity.",
)
@client_options
@click.version_option(version=__version__)
@click.pass_context
def cli(
    ctx,
    configfile,
    verbosity,
    apikey,
    host,
    port,
    httpuser,
    httppass,
    https,
    prefix,
    timeout,
):
    """Query and control the current print job."""
    init_logging(verbosity=verbosity)

    try:
        settings = load_settings(
            configfile,
            apikey=apikey,
            host=host,
            port=port,
            httpuser=httpuser,
            httppass=httppass,
            https=https,
            prefix=prefix,
            timeout=timeout,
        )
    except ConfigurationError as e:
        click.echo(str(e), err=True)
        click.echo("There was a fatal error initializing the client.", err=True)
        ctx.exit(1)

    connection, tracker = create_tracker(settings)
    ctx.obj = PrinterfaceContext(connection=connection, tracker=tracker)


def _run(ctx, f):
    try:
        return f()
    except PrinterfaceException as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


def format_info(info):
    lines = [
        f"File: {info.file.name or '-'}",
        f"Origin: {info.file.origin or '-'}",
        f"Size: {info.file.size}",
        f"Date: {info.file.date}",
        f"EstimatedPrintTime: {info.estimated_print_time}",
    ]
    if info.filament is not None:
        lines.append(f"FilamentLength: {info.filament.length}")
        lines.append(f"FilamentVolume: {info.filament.volume}")
    return "\n".join(lines)


@cli.command("info")
@click.pass_context
def info(ctx):
    """Shows info about the current job."""
    result = _run(ctx, ctx.obj.tracker.get_info)
    click.echo(format_info(result))


@cli.command("progress")
@click.pass_context
def progress(ctx):
    """Shows the progress of the current job."""
    result = _run(ctx, ctx.obj.tracker.get_progress)
    click.echo(str(result).rstrip("\n"))


def _job_command(name, method, doc):
    @click.pass_context
    def command(ctx):
        click.echo(getattr(ctx.obj.tracker, method)())

    command.__doc__ = doc
    return cli.command(name)(command)


start = _job_command("start", "start_job", "Starts the selected job.")
cancel = _job_command("cancel", "cancel_job", "Cancels the current job.")
restart = _job_command("restart", "restart_job", "Restarts the paused job.")
pause = _job_command("pause", "pause_job", "Pauses the current job.")
resume = _job_command("resume", "resume_job", "Resumes the paused job.")
toggle = _job_command(
    "toggle", "toggle_job", "Pauses the job if it runs, resumes it if it is paused."
)


@cli.command("listen")
@click.option("--timeout", "wait_timeout", type=float, default=None)
@click.pass_context
def listen(ctx, wait_timeout):
    """Prints job and progress updates pushed by the server."""
    tracker = ctx.obj.tracker

    def on_info(info):
        click.echo("<<< Job info")
        click.echo(format_info(info))

    def on_progress(progress):
        click.echo("<<< Progress")
        click.echo(str(progress).rstrip("\n"))

    def on_open(ws):
        click.echo("--- Connected!")

    def on_close(ws):
        click.echo("--- Connection closed!")

    def on_error(ws, error):
        click.echo(f"!!! Error: {error}", err=True)

    tracker.subscribe_job_info(on_info)
    tracker.subscribe_progress(on_progress)

    relay = JobPushRelay(tracker)
    socket = relay.connect(
        ctx.obj.connection, on_open=on_open, on_close=on_close, on_error=on_error
    )

    click.echo("--- Waiting for updates, press Ctrl+C to exit")
    try:
        socket.wait(timeout=wait_timeout)
    except (KeyboardInterrupt, SocketTimeout):
        socket.disconnect()
    finally:
        click.echo("--- Goodbye...")


def main():
    cli(prog_name="printerface")


if __name__ == "__main__":
    main()
