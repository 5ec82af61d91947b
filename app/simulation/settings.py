"""Engine settings - timeouts, ngspice location and run directory.

Settings are read from a JSON file in the user's config directory. A missing
file means defaults; an unreadable one is logged and ignored.
"""

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

ENGINE_NGSPICE = "ngspice"
ENGINE_OFFLINE = "offline"
ENGINES = (ENGINE_NGSPICE, ENGINE_OFFLINE)


@dataclass
class EngineSettings:
    """User-tunable settings for running the external simulator."""

    engine: str = ENGINE_NGSPICE
    ngspice_path: Optional[str] = None
    output_dir: str = "simulation_output"
    simulation_timeout: float = 30.0
    command_timeout: float = 10.0
    selected_variable_count: int = 5

    def __post_init__(self):
        if self.engine not in ENGINES:
            raise ValueError(f"Unknown engine '{self.engine}' (expected one of {', '.join(ENGINES)})")
        if self.simulation_timeout <= 0 or self.command_timeout <= 0:
            raise ValueError("Timeouts must be positive")
        if self.selected_variable_count < 0:
            raise ValueError("selected_variable_count must not be negative")

    @classmethod
    def from_dict(cls, data: dict) -> "EngineSettings":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning("Ignoring unknown settings: %s", ", ".join(unknown))
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> dict:
        return asdict(self)


def default_settings_path() -> Path:
    """Return the default path for the settings file."""
    return Path.home() / ".ngspicex" / "settings.json"


def load_settings(path: Optional[Path] = None) -> EngineSettings:
    """Load settings from *path* (default: the user config file)."""
    if path is None:
        path = default_settings_path()
    path = Path(path)

    if not path.exists():
        return EngineSettings()

    try:
        data = json.loads(path.read_text())
        if not isinstance(data, dict):
            raise ValueError("settings file must contain a JSON object")
        return EngineSettings.from_dict(data)
    except (json.JSONDecodeError, OSError, TypeError, ValueError) as e:
        logger.warning("Failed to load settings from %s: %s", path, e)
        return EngineSettings()


def save_settings(settings: EngineSettings, path: Optional[Path] = None) -> None:
    """Write settings to disk."""
    if path is None:
        path = default_settings_path()
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(settings.to_dict(), indent=2))
    except OSError as e:
        logger.error("Failed to save settings to %s: %s", path, e)
