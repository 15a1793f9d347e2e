from __future__ import annotations
from dataclasses import asdict, dataclass, fields
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

log = logging.getLogger(__name__)

ENV_HOME = "TYPESPRINT_HOME"
DURATION_OPTIONS = (15, 30, 60, 120, 300)


def data_dir(root: Optional[Path] = None) -> Path:
    if root:
        return Path(root)
    env_root = os.environ.get(ENV_HOME)
    if env_root:
        return Path(env_root)
    return Path("data")


def db_path(root: Optional[Path] = None) -> Path:
    return data_dir(root) / "results.db"


def settings_path(root: Optional[Path] = None) -> Path:
    return data_dir(root) / "settings.json"


def custom_texts_path(root: Optional[Path] = None) -> Path:
    return data_dir(root) / "custom_texts.json"


def themes_path(root: Optional[Path] = None) -> Path:
    return data_dir(root) / "themes.json"


def log_path(root: Optional[Path] = None) -> Path:
    return data_dir(root) / "typesprint.log"


@dataclass
class Settings:
    theme: str = "Dark"
    # practice content
    category: str = "quotes"
    difficulty: str = "medium"
    length: str = "medium"
    # timed test
    duration: int = 60
    content_type: str = "mixed"
    include_numbers: bool = True
    include_punctuation: bool = True
    include_capitals: bool = True
    # developer drills
    language: str = "python"
    snippet_difficulty: str = "beginner"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Settings":
        known = {f.name for f in fields(cls)}
        s = cls(**{k: v for k, v in d.items() if k in known})
        if s.duration not in DURATION_OPTIONS:
            s.duration = 60
        return s


def load_settings(root: Optional[Path] = None) -> Settings:
    path = settings_path(root)
    if not path.exists():
        return Settings()
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError("settings file must hold a JSON object")
        return Settings.from_dict(raw)
    except (OSError, ValueError, TypeError) as e:
        log.warning("Ignoring unreadable settings file %s: %s", path, e)
        return Settings()


def save_settings(settings: Settings, root: Optional[Path] = None) -> bool:
    path = settings_path(root)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(asdict(settings), indent=2), encoding="utf-8")
        return True
    except OSError as e:
        log.warning("Failed to save settings to %s: %s", path, e)
        return False
