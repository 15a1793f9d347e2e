from pathlib import Path
from typing import Optional

from app.config import data_dir, save_settings, settings_path, Settings


def ensure_app_files(root: Optional[Path] = None) -> Path:
    """Create the data directory and a default settings file on first run."""
    home = data_dir(root)
    home.mkdir(parents=True, exist_ok=True)
    if not settings_path(home).exists():
        save_settings(Settings(), home)
    return home
