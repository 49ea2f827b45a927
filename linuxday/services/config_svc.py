# linuxday/services/config_svc.py
from ..db import get_conn
from ..logs import LogContext
from ..domain.errors import ValidationFailure
from ..domain.ical import DEFAULT_PRODID

DEFAULTS = {
    "site_name": "Linux Day Torino",
    # base of every public URL (conference pages, event permalinks, iCal URL line)
    "site_url": "https://linuxdaytorino.org",
    "ical_prodid": DEFAULT_PRODID,
}

def ensure_default_config():
    """Insert missing keys, never overwrite existing values."""
    with get_conn() as conn:
        for k, v in DEFAULTS.items():
            conn.execute(
                "INSERT INTO config(key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO NOTHING",
                (k, v),
            )
        conn.commit()

def get_config() -> dict:
    with get_conn() as conn:
        rows = conn.execute("SELECT key, value FROM config").fetchall()
    cfg = {r["key"]: r["value"] for r in rows}
    return {k: (cfg.get(k) or v) for k, v in DEFAULTS.items()}

def update_config(upd: dict, log: LogContext) -> list[str]:
    unknown = [k for k in upd if k not in DEFAULTS]
    if unknown:
        raise ValidationFailure(f"unknown setting(s): {', '.join(sorted(unknown))}")
    updated = []
    with get_conn() as conn:
        before = {r["key"]: r["value"] for r in conn.execute("SELECT key,value FROM config")}
        for k, v in upd.items():
            conn.execute(
                "INSERT INTO config(key,value) VALUES(?,?) "
                "ON CONFLICT(key) DO UPDATE SET value=excluded.value",
                (k, str(v))
            )
            updated.append(k)
        conn.commit()
        after = {r["key"]: r["value"] for r in conn.execute("SELECT key,value FROM config")}
    log.set_before(before); log.set_after(after)
    return updated
