"""
Command line entry point for dnsconsole.

    dnsconsole serve            run the API server
    dnsconsole hash-password    print a password hash for the operator config
"""

import logging.config as log_config

import click
import uvicorn
from dotenv import find_dotenv, load_dotenv

from dnsconsole import __version__
from dnsconsole.config.provider import EnvConfigProvider
from dnsconsole.logging_config import get_logging_config
from dnsconsole.modules.auth import hash_password


@click.group()
@click.version_option(__version__, prog_name="dnsconsole")
def main():
    """Multi-account Cloudflare DNS administration backend."""


@main.command()
@click.option("--host", "host", default=None, help="Bind address (default: API_HOST or 0.0.0.0)")
@click.option("--port", "port", type=int, default=None, help="Bind port (default: API_PORT or 3005)")
@click.option("--env-file", "env_file", default=None, type=click.Path(dir_okay=False),
              help="Load environment variables from this file before starting")
@click.option("--reload", "reload", is_flag=True, help="Auto-reload on code changes (development)")
def serve(host, port, env_file, reload):
    """Run the API server."""
    load_dotenv(env_file or find_dotenv(usecwd=True))

    api_config = EnvConfigProvider().get_api_config()
    logging_config = get_logging_config(api_config.log_level, health_path=f"{api_config.prefix}/health")
    log_config.dictConfig(logging_config)

    uvicorn.run(
        "dnsconsole.main:create_app",
        factory=True,
        host=host or api_config.host,
        port=port or api_config.port,
        log_level=api_config.log_level.lower(),
        log_config=logging_config,
        reload=reload,
    )


@main.command("hash-password")
@click.password_option(prompt="Password", help="Password to hash (prompted when omitted)")
def hash_password_command(password):
    """Print a password hash for use as password_hash in the operator config."""
    if not password:
        raise click.BadParameter("password must not be empty", param_hint="--password")
    click.echo(hash_password(password))


if __name__ == "__main__":
    main()
