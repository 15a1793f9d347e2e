# app/themes.py
from __future__ import annotations
from dataclasses import dataclass
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

log = logging.getLogger(__name__)


@dataclass
class Theme:
    name: str
    background: str
    surface: str
    primary: str
    text: str
    text_muted: str
    correct: str
    incorrect: str
    current: str
    caret: str


# -------- Built-in themes --------
THEMES: List[Theme] = [
    Theme("Dark", "#1a1a1a", "#2a2a2a", "#3b82f6", "#ffffff", "#64748b",
          "#10b981", "#ef4444", "#f59e0b", "#3b82f6"),
    Theme("Light", "#ffffff", "#f8fafc", "#3b82f6", "#1e293b", "#94a3b8",
          "#10b981", "#ef4444", "#f59e0b", "#3b82f6"),
    Theme("Neon Cyberpunk", "#0a0a0a", "#111111", "#00ffff", "#ffffff", "#666666",
          "#00ff00", "#ff0040", "#ffff00", "#00ffff"),
    Theme("Ocean Depths", "#0f172a", "#1e293b", "#0ea5e9", "#f1f5f9", "#64748b",
          "#10b981", "#f97316", "#06b6d4", "#0ea5e9"),
    Theme("Sunset Vibes", "#1c1917", "#292524", "#f97316", "#fef7ed", "#a3a3a3",
          "#22c55e", "#dc2626", "#f59e0b", "#f97316"),
]
DEFAULT_THEME = "Dark"

_REQUIRED = {f for f in Theme.__dataclass_fields__}


# -------- helpers --------
def theme_from_dict(d: Dict[str, Any]) -> Theme:
    missing = _REQUIRED - set(d.keys())
    if missing:
        raise ValueError(f"Missing theme keys: {', '.join(sorted(missing))}")
    return Theme(**{k: str(d[k]) for k in _REQUIRED})


def theme_by_name(name: Optional[str], themes: Optional[List[Theme]] = None) -> Theme:
    themes = themes or THEMES
    for t in themes:
        if t.name == name:
            return t
    return themes[0]


# -------- public API used by UI --------
def load_custom_themes(path: Path) -> List[Theme]:
    """Built-in themes followed by the valid, uniquely named entries of a JSON list."""
    themes = list(THEMES)
    if not path.exists():
        return themes
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        log.warning("Ignoring unreadable themes file %s: %s", path, e)
        return themes
    for item in data if isinstance(data, list) else []:
        try:
            theme = theme_from_dict(item)
        except (ValueError, AttributeError) as e:
            log.warning("Skipping custom theme: %s", e)
            continue
        if any(t.name == theme.name for t in themes):
            continue
        themes.append(theme)
    return themes

