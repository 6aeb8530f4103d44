import logging
import os
from pathlib import Path

from pydantic import BaseModel, Field


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def default_data_dir() -> Path:
    if (override := os.environ.get("POMOTRACK_DATA_DIR")):
        return Path(override)
    xdg_data_home = os.environ.get("XDG_DATA_HOME")
    if xdg_data_home:
        base_dir = Path(xdg_data_home)
    else:
        base_dir = Path.home() / ".local" / "share"
    return base_dir / "pomotrack"


class AppConfig(BaseModel):
    data_dir: Path = Field(default_factory=default_data_dir)
    user_id: str = ""
    tick_seconds: float = Field(default=1.0, gt=0)
    probe_seconds: float = Field(default=30.0, gt=0)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "AppConfig":
        return cls(
            data_dir=default_data_dir(),
            user_id=os.getenv("POMOTRACK_USER", "").strip(),
            tick_seconds=_env_float("POMOTRACK_TICK_SECONDS", 1.0),
            probe_seconds=_env_float("POMOTRACK_PROBE_SECONDS", 30.0),
            log_level=os.getenv("POMOTRACK_LOG_LEVEL", "INFO").strip().upper() or "INFO",
        )

    @property
    def log_file(self) -> Path:
        return self.data_dir / "pomotrack.log"


def configure_logging(config: AppConfig) -> None:
    """Send logs to a file; the terminal belongs to the TUI."""
    config.data_dir.mkdir(parents=True, exist_ok=True)
    level = logging.getLevelName(config.log_level)
    logging.basicConfig(
        filename=config.log_file,
        level=level if isinstance(level, int) else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
