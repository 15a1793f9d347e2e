import json
import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Optional

from app.errors import DatabaseError

_COLUMNS = (
    "mode", "wpm", "raw_wpm", "accuracy", "consistency", "efficiency",
    "correct_chars", "incorrect_chars", "time_elapsed", "total_characters",
    "target_characters", "aborted", "started_at", "ended_at", "settings_json",
)


def _ensure_schema(conn):
    conn.execute("""
    CREATE TABLE IF NOT EXISTS results(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        mode TEXT NOT NULL,
        wpm INTEGER,
        raw_wpm INTEGER,
        accuracy INTEGER,
        consistency REAL,
        efficiency REAL,
        correct_chars INTEGER,
        incorrect_chars INTEGER,
        time_elapsed REAL,
        total_characters INTEGER,
        target_characters INTEGER,
        aborted INTEGER DEFAULT 0,
        started_at REAL,
        ended_at REAL,
        settings_json TEXT
    );
    """)
    conn.execute("CREATE INDEX IF NOT EXISTS idx_results_ended ON results(ended_at)")


def get_conn(db_path: Path):
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    _ensure_schema(conn)
    return conn


def insert_result(db_path: Path, row: Dict[str, Any]) -> int:
    conn = None
    try:
        conn = get_conn(db_path)
        values = [row.get(c) for c in _COLUMNS[:-1]] + [json.dumps(row.get("settings") or {})]
        cur = conn.execute(
            f"INSERT INTO results({', '.join(_COLUMNS)}) VALUES ({', '.join('?' * len(_COLUMNS))})",
            values,
        )
        conn.commit()
        return cur.lastrowid
    except (sqlite3.Error, OSError, TypeError) as e:
        raise DatabaseError(str(e)) from e
    finally:
        if conn is not None:
            conn.close()


def fetch_results(db_path: Path, since: Optional[float] = None) -> List[Dict[str, Any]]:
    """Newest first."""
    conn = None
    try:
        conn = get_conn(db_path)
        if since is None:
            cur = conn.execute("SELECT * FROM results ORDER BY ended_at DESC, id DESC")
        else:
            cur = conn.execute(
                "SELECT * FROM results WHERE ended_at >= ? ORDER BY ended_at DESC, id DESC", (since,)
            )
        out = []
        for r in cur.fetchall():
            d = dict(r)
            d["aborted"] = bool(d.get("aborted"))
            d["settings"] = json.loads(d.pop("settings_json") or "{}")
            out.append(d)
        return out
    except (sqlite3.Error, OSError, ValueError) as e:
        raise DatabaseError(str(e)) from e
    finally:
        if conn is not None:
            conn.close()


def clear_results(db_path: Path) -> None:
    conn = None
    try:
        conn = get_conn(db_path)
        conn.execute("DELETE FROM results")
        conn.commit()
    except (sqlite3.Error, OSError) as e:
        raise DatabaseError(str(e)) from e
    finally:
        if conn is not None:
            conn.close()
