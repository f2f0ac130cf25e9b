"""CLI commands for inkpost."""

import base64
import re
import secrets
import sys
from pathlib import Path

import click

PACKAGE_DIR = Path(__file__).parent


@click.group()
@click.version_option(package_name="inkpost")
def cli():
    """inkpost - blog backend for media assets and threaded comments."""
    pass


@cli.command()
@click.option("--host", default="127.0.0.1", help="Host to bind to")
@click.option("--port", default=8000, type=int, help="Port to bind to")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
@click.option("--workers", default=1, type=int, help="Number of worker processes")
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Logging level",
)
def serve(host, port, reload, workers, log_level):
    """Run the inkpost API server."""
    import asyncio
    import signal

    from hypercorn.asyncio import serve as hypercorn_serve
    from hypercorn.config import Config

    config = Config()
    config.application_path = "inkpost.asgi:app"
    config.bind = [f"{host}:{port}"]
    config.workers = 1 if reload else workers
    config.loglevel = log_level.upper()
    config.include_server_header = False

    if reload:
        config.use_reloader = True
        from hypercorn.run import run
        run(config)
        return

    from inkpost.asgi import app

    shutdown_event = asyncio.Event()

    loop = asyncio.new_event_loop()
    loop.add_signal_handler(signal.SIGINT, shutdown_event.set)
    loop.add_signal_handler(signal.SIGTERM, shutdown_event.set)
    try:
        loop.run_until_complete(
            hypercorn_serve(app, config, shutdown_trigger=shutdown_event.wait)
        )
    finally:
        loop.close()


@cli.command()
@click.option(
    "--write",
    type=click.Path(),
    default=None,
    help="Write SECRET_KEY to a .env file",
)
@click.option(
    "--format",
    "fmt",
    default="urlsafe",
    type=click.Choice(["urlsafe", "hex", "base64"]),
    help="Output format for the secret key",
)
@click.option("--length", default=32, type=int, help="Number of random bytes")
def secret(write, fmt, length):
    """Generate a secure secret key."""
    if fmt == "urlsafe":
        key = secrets.token_urlsafe(length)
    elif fmt == "hex":
        key = secrets.token_hex(length)
    else:
        key = base64.b64encode(secrets.token_bytes(length)).decode("ascii")

    if not write:
        click.echo(key)
        return

    env_path = Path(write)
    env_content = env_path.read_text() if env_path.exists() else ""

    secret_key_pattern = re.compile(r"^SECRET_KEY=.*$", re.MULTILINE)
    new_line = f"SECRET_KEY={key}"

    if secret_key_pattern.search(env_content):
        env_content = secret_key_pattern.sub(new_line, env_content)
    else:
        if env_content and not env_content.endswith("\n"):
            env_content += "\n"
        env_content += new_line + "\n"

    env_path.write_text(env_content)
    click.echo(f"SECRET_KEY written to {env_path}")


def _alembic_config():
    """Build an Alembic Config pointing at the migrations shipped with the package."""
    from alembic.config import Config

    alembic_ini = Path.cwd() / "alembic.ini"
    cfg = Config(str(alembic_ini)) if alembic_ini.exists() else Config()
    cfg.set_main_option("script_location", str(PACKAGE_DIR / "alembic"))
    return cfg


def _run_alembic(args: list[str]) -> None:
    """Parse ``args`` with Alembic's own CLI parser and run the command."""
    from alembic.config import CommandLine

    cfg = _alembic_config()
    cmd = CommandLine(prog="inkpost db")
    options = cmd.parser.parse_args(args)
    if not hasattr(options, "cmd"):
        cmd.parser.error("too few arguments")

    cfg.cmd_opts = options
    fn, positional, kwarg = options.cmd
    fn(
        cfg,
        *[getattr(options, k, None) for k in positional],
        **{k: getattr(options, k, None) for k in kwarg},
    )


@cli.command(
    context_settings=dict(
        ignore_unknown_options=True,
        allow_extra_args=True,
    )
)
@click.pass_context
def db(ctx):
    """Run database migrations via Alembic.

    \b
    Examples:
        inkpost db upgrade head    # Apply all migrations
        inkpost db downgrade -1    # Rollback one migration
        inkpost db current         # Show current revision
        inkpost db history         # Show migration history
    """
    if not ctx.args:
        click.echo(ctx.get_help())
        return

    try:
        _run_alembic(ctx.args)
    except SystemExit:
        raise
    except Exception as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    cli()
