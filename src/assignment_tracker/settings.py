"""User settings stored alongside the assignment data."""
from assignment_tracker.dates import DEFAULT_TIMEZONE, get_zone
from assignment_tracker.db import get_connection

DUE_SOON_HOURS = 48


def get_setting(db_path: str, key: str, default: str = None) -> str | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT value FROM user_settings WHERE key = ?", (key,)).fetchone()
    conn.close()
    return row["value"] if row else default


def set_setting(db_path: str, key: str, value: str) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO user_settings (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=?",
        (key, value, value),
    )
    conn.commit()
    conn.close()


def get_timezone(db_path: str) -> str:
    return get_setting(db_path, "timezone", DEFAULT_TIMEZONE)


def set_timezone(db_path: str, name: str) -> None:
    """Store the planning timezone. Raises ValueError for unknown names."""
    name = name.strip()
    get_zone(name)
    set_setting(db_path, "timezone", name)
