from __future__ import annotations

from ..logs import LogContext
from ..domain.entities import Skill
from ..domain.errors import ValidationFailure
from ..domain.record import DBCol
from ..domain.request import RequestContext
from ..domain.traits import skill_phrase
from .auth_svc import require_permission


def list_skills() -> list[dict]:
    out = []
    for s in Skill.factory().order_by(Skill.UID).query_generator():
        it = s.as_dict()
        it["phrase"] = skill_phrase(s)
        out.append(it)
    return out


def create_skill(ctx: RequestContext, uid: str, phrase: str | None, skill_type: str | None, log: LogContext) -> int:
    require_permission(ctx, "edit-skills", "Can't create skill")
    if Skill.factory_from_uid(uid).query_row():
        raise ValidationFailure(f"skill uid '{uid}' already taken")
    new_id = Skill.insert_row([
        DBCol(Skill.UID, uid),
        DBCol(Skill.PHRASE, phrase),
        DBCol(Skill.TYPE, skill_type or "subject"),
    ])
    log.set_entity("SKILL", new_id)
    log.set_after({"skill_uid": uid, "skill_phrase": phrase, "skill_type": skill_type or "subject"})
    return new_id
