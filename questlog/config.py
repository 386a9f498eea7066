from pathlib import Path

import yaml

QUESTLOG_DIR = Path.home() / ".questlog"
DB_PATH = QUESTLOG_DIR / "questlog.db"
CONFIG_PATH = QUESTLOG_DIR / "config.yaml"
BACKUP_DIR = Path.home() / ".questlog_backups"

DEFAULT_WEEK_START = 1
DEFAULT_REFRESH_WORKERS = 1


class Config:
    """Single-instance config manager. Load once, cache in memory."""

    _instance: "Config | None" = None
    _data: dict[str, object]

    def __new__(cls) -> "Config":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._data = {}
            cls._instance._load()
        return cls._instance

    def _load(self) -> None:
        """Load config from disk."""
        if not CONFIG_PATH.exists():
            self._data = {}
            return
        try:
            with CONFIG_PATH.open() as f:
                self._data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError):
            self._data = {}

    def _save(self) -> None:
        """Persist config to disk."""
        QUESTLOG_DIR.mkdir(exist_ok=True)
        with CONFIG_PATH.open("w") as f:
            yaml.dump(self._data, f, default_flow_style=False, allow_unicode=True)

    def reload(self) -> None:
        self._load()

    def get(self, key: str, default: object = None) -> object:
        """Get config value."""
        return self._data.get(key, default)

    def set(self, key: str, value: object) -> None:
        """Set config value and persist."""
        self._data[key] = value
        self._save()


_config = Config()


def get_week_start() -> int:
    """ISO weekday weeks start on (1=Monday). Falls back to Monday on bad values."""
    val = _config.get("week_start", DEFAULT_WEEK_START)
    try:
        day = int(val)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        return DEFAULT_WEEK_START
    return day if 1 <= day <= 7 else DEFAULT_WEEK_START


def set_week_start(day: int) -> None:
    if not 1 <= day <= 7:
        raise ValueError(f"week_start must be 1..7, got {day}")
    _config.set("week_start", day)


def get_refresh_workers() -> int:
    val = _config.get("refresh_workers", DEFAULT_REFRESH_WORKERS)
    try:
        workers = int(val)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        return DEFAULT_REFRESH_WORKERS
    return max(workers, 1)
