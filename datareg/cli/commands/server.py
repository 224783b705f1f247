"""Server command - run the registry API in the foreground."""

import cyclopts
import uvicorn

from datareg.cli.console import get_console
from datareg.util.paths import RegistryPaths

app = cyclopts.App(name="server", help="Server management commands")


@app.command
def start(host: str = "127.0.0.1", port: int = 8000, reload: bool = False) -> None:
    """Start the registry server in the foreground.

    Configuration comes from DATAREG_* environment variables, a .env file, or
    the YAML file named by DATAREG_CONFIG_FILE.

    Args:
        host: Host to bind to.
        port: Port to listen on.
        reload: Restart on code changes (development only).
    """
    paths = RegistryPaths()
    paths.ensure_directories()

    get_console().info(f"Data directory: {paths.data_dir}")
    uvicorn.run(
        "datareg.application.api.rest.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_config=None,  # configure_logging() owns the root logger
    )
