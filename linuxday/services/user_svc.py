from __future__ import annotations

import logging
from sqlite3 import Connection

from ..db import get_conn, transaction
from ..logs import LogContext
from ..domain.entities import Skill, User, UserSkill
from ..domain.errors import NotFound, PermissionDenied, ValidationFailure
from ..domain.record import DBCol
from ..domain.request import RequestContext
from ..domain.traits import has_permission_to_edit_user, skill_phrase, skills_of_user, user_fullname

logger = logging.getLogger(__name__)


def _user_dict(user: User) -> dict:
    out = user.as_dict()
    out["fullname"] = user_fullname(user)
    return out


def _skill_rows(conn: Connection, user: User) -> list[dict]:
    items = []
    for row in skills_of_user(user, conn).query_generator():
        items.append({
            "skill_uid": row.get(Skill.UID),
            "skill_score": row.score,
            "skill_phrase": skill_phrase(row),
        })
    return items


def _load_editable_user(conn: Connection, ctx: RequestContext, user_uid: str) -> User:
    user = User.factory_from_uid(user_uid, conn).query_row()
    if not user:
        raise NotFound("not found")
    if not has_permission_to_edit_user(user, ctx):
        raise PermissionDenied("Can't edit user")
    return user


def _load_skill(conn: Connection, skill_uid: str) -> Skill:
    skill = Skill.factory_from_uid(skill_uid, conn).query_row()
    if not skill:
        raise NotFound(f"Skill '{skill_uid}' not found")
    return skill


def get_user_detail(user_uid: str) -> dict:
    with get_conn() as conn:
        user = User.factory_from_uid(user_uid, conn).query_row()
        if not user:
            raise NotFound("not found")
        out = _user_dict(user)
        out["skills"] = _skill_rows(conn, user)
        return out


def list_users() -> list[dict]:
    return [_user_dict(u) for u in User.factory().order_by(User.SURNAME).order_by(User.NAME).query_generator()]


def save_user(ctx: RequestContext, current_uid: str | None, name: str, surname: str, uid: str, log: LogContext) -> dict:
    """Create a user, or update name/surname/UID of an existing one."""
    data = [
        DBCol(User.NAME, name, "s"),
        DBCol(User.SURNAME, surname, "s"),
        DBCol(User.UID, uid, "s"),
    ]
    with get_conn() as conn:
        user = None
        if current_uid:
            user = _load_editable_user(conn, ctx, current_uid)
        elif not ctx.has_permission("edit-users"):
            raise PermissionDenied("Can't create user")

        other = User.factory_from_uid(uid, conn).query_row()
        if other and (user is None or other.id != user.id):
            raise ValidationFailure(f"user uid '{uid}' already taken")

        if user:
            log.set_before(user.as_dict())
            User.factory_by_id(user.id, conn).update(data)
            user_id = user.id
        else:
            user_id = User.insert_row(data, conn)

        after = User.factory_by_id(user_id, conn).query_row()
    log.set_entity("USER", user_id)
    log.set_after(after.as_dict())
    return _user_dict(after)


def add_user_skill(ctx: RequestContext, user_uid: str, skill_uid: str, score, log: LogContext) -> list[dict]:
    """
    Assign a skill to a user. An existing assignment is replaced, so a
    (user, skill) pair never has more than one row.
    """
    with get_conn() as conn:
        user = _load_editable_user(conn, ctx, user_uid)
        skill = _load_skill(conn, skill_uid)
        with transaction(conn):
            UserSkill.factory_by_pair(user.id, skill.id, conn).delete()
            UserSkill.insert_row([
                DBCol(User.ID, user.id, "d"),
                DBCol(Skill.ID, skill.id, "d"),
                DBCol(UserSkill.SCORE, score, "d"),
            ], conn)
        skills = _skill_rows(conn, user)
    logger.info("skill %s assigned to %s", skill_uid, user_uid)
    log.set_entity("USER", user.id)
    log.set_after({"skill_uid": skill_uid, "skill_score": score})
    return skills


def change_user_skill(ctx: RequestContext, user_uid: str, skill_uid: str, score, delete: bool, log: LogContext) -> list[dict]:
    """Update the score of one of the user's skills, or drop it."""
    with get_conn() as conn:
        user = _load_editable_user(conn, ctx, user_uid)
        skill = _load_skill(conn, skill_uid)
        pair = UserSkill.factory_by_pair(user.id, skill.id, conn)
        if delete:
            pair.delete()
        elif not pair.update([DBCol(UserSkill.SCORE, score, "d")]):
            raise NotFound(f"Skill '{skill_uid}' not assigned to '{user_uid}'")
        skills = _skill_rows(conn, user)
    log.set_entity("USER", user.id)
    log.set_after({"skill_uid": skill_uid, "skill_score": None if delete else score, "deleted": delete})
    return skills
