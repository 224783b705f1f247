"""Where datareg keeps its files on disk.

Directory layout:
    ~/.local/share/datareg/
        datareg.db          # SQLite database

    ~/.local/state/datareg/
        logs/
            server.log      # Server logs

DATAREG_DATA_DIR and DATAREG_STATE_DIR override the two roots.
"""

import os
from pathlib import Path


class RegistryPaths:
    """Resolves datareg paths following the XDG Base Directory layout.

    Supports overriding individual directories for testing.
    """

    def __init__(self, *, data_dir: Path | None = None, state_dir: Path | None = None) -> None:
        home = Path.home()
        self._data_dir = (
            data_dir
            or _env_path("DATAREG_DATA_DIR")
            or home / ".local" / "share" / "datareg"
        )
        self._state_dir = (
            state_dir
            or _env_path("DATAREG_STATE_DIR")
            or home / ".local" / "state" / "datareg"
        )

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    @property
    def state_dir(self) -> Path:
        return self._state_dir

    @property
    def database_file(self) -> Path:
        """SQLite database file."""
        return self._data_dir / "datareg.db"

    @property
    def logs_dir(self) -> Path:
        return self._state_dir / "logs"

    @property
    def server_log(self) -> Path:
        return self.logs_dir / "server.log"

    def ensure_directories(self) -> None:
        """Create the data and log directories if they don't exist."""
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self.logs_dir.mkdir(parents=True, exist_ok=True)


def _env_path(name: str) -> Path | None:
    value = os.environ.get(name)
    return Path(value).expanduser() if value else None
