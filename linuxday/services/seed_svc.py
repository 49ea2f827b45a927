# linuxday/services/seed_svc.py
from __future__ import annotations

import pandas as pd

from ..db import get_conn
from ..logs import LogContext
from ..domain.entities import Skill, User
from ..domain.record import DBCol


def _cell(r, key: str, default: str | None = None) -> str | None:
    v = r.get(key, default)
    if v is None or (isinstance(v, float) and pd.isna(v)):
        return default
    v = str(v).strip()
    return v or default


def seed_load(skills_csv: str | None, users_csv: str | None, log: LogContext) -> dict:
    """Import skills and users from CSV; rows whose UID already exists are skipped.
       skills.csv: uid, phrase, type
       users.csv:  uid, name, surname, email, role
    """
    created_skill = 0
    created_user = 0

    with get_conn() as conn:
        if skills_csv:
            for _, r in pd.read_csv(skills_csv).iterrows():
                uid = _cell(r, "uid")
                if not uid or Skill.factory_from_uid(uid, conn).query_row():
                    continue
                Skill.insert_row([
                    DBCol(Skill.UID, uid),
                    DBCol(Skill.PHRASE, _cell(r, "phrase")),
                    DBCol(Skill.TYPE, _cell(r, "type", "subject")),
                ], conn)
                created_skill += 1

        if users_csv:
            for _, r in pd.read_csv(users_csv).iterrows():
                uid = _cell(r, "uid")
                if not uid or User.factory_from_uid(uid, conn).query_row():
                    continue
                User.insert_row([
                    DBCol(User.UID, uid),
                    DBCol(User.NAME, _cell(r, "name", "")),
                    DBCol(User.SURNAME, _cell(r, "surname", "")),
                    DBCol(User.EMAIL, _cell(r, "email")),
                    DBCol(User.ROLE, _cell(r, "role", "user")),
                ], conn)
                created_user += 1

    log.set_after({"created_skill": created_skill, "created_user": created_user})
    return {"created_skill": created_skill, "created_user": created_user}
