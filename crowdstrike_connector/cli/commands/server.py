"""Server commands."""

import subprocess
import sys

import click

from crowdstrike_connector.cli.utils import error, info
from crowdstrike_connector.core.settings import get_app_settings


@click.command(name="serve")
@click.option("--host", default=None, help="Host to bind (default: APP_HOST or 0.0.0.0)")
@click.option("--port", default=None, type=int, help="Port to bind (default: APP_PORT or 8000)")
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["critical", "error", "warning", "info", "debug"]),
    help="Log level",
)
def serve(host: str | None, port: int | None, log_level: str) -> None:
    """Run the HTTP page endpoint with uvicorn."""
    settings = get_app_settings()
    host = host or settings.host
    port = port or settings.port

    info(f"Server will run at: http://{host}:{port}")
    cmd = [
        sys.executable,
        "-m",
        "uvicorn",
        "crowdstrike_connector.app.main:app",
        "--host",
        host,
        "--port",
        str(port),
        "--log-level",
        log_level,
    ]
    try:
        subprocess.run(cmd, check=True)
    except KeyboardInterrupt:
        info("\nShutting down server...")
    except subprocess.CalledProcessError as e:
        error(f"Server exited with status {e.returncode}")
        sys.exit(e.returncode)
