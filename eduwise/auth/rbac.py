"""
Role capabilities. can() is the only place that answers "may this user do X on Y";
routes depend on check_permission(); services scope teachers with ensure_teaches_class().
"""
from typing import Dict, FrozenSet

from fastapi import Depends, HTTPException, status

from eduwise.auth.dependencies import get_current_user, get_teacher_id_for_user
from eduwise.auth.schemas import CurrentUser
from eduwise.core.exceptions import ServiceError

ALL_ROLES = frozenset({"ADMIN", "TEACHER", "STUDENT", "PARENT", "REGISTRAR", "STAFF"})
OFFICE = frozenset({"ADMIN", "REGISTRAR"})
STAFF_READERS = frozenset({"ADMIN", "REGISTRAR", "TEACHER", "STAFF"})
ADMIN_ONLY = frozenset({"ADMIN"})
GRADERS = frozenset({"ADMIN", "TEACHER"})


def _crud(create, read, update, delete) -> Dict[str, FrozenSet[str]]:
    return {"create": create, "read": read, "update": update, "delete": delete}


# resource -> action -> roles allowed
CAPABILITIES: Dict[str, Dict[str, FrozenSet[str]]] = {
    "courses": _crud(OFFICE, ALL_ROLES, OFFICE, ADMIN_ONLY),
    "terms": _crud(OFFICE, ALL_ROLES, OFFICE, ADMIN_ONLY),
    "classes": _crud(OFFICE, ALL_ROLES, OFFICE, ADMIN_ONLY),
    "sections": _crud(OFFICE, ALL_ROLES, OFFICE, ADMIN_ONLY),
    "schedules": _crud(OFFICE, ALL_ROLES, OFFICE, OFFICE),
    "enrollments": _crud(OFFICE, STAFF_READERS, OFFICE, OFFICE),
    "registrations": _crud(ALL_ROLES, OFFICE, OFFICE, ADMIN_ONLY),
    "students": _crud(OFFICE, STAFF_READERS, OFFICE, ADMIN_ONLY),
    "teachers": _crud(ADMIN_ONLY, STAFF_READERS, ADMIN_ONLY, ADMIN_ONLY),
    "attendance": _crud(GRADERS, STAFF_READERS, GRADERS, ADMIN_ONLY),
    "assignments": _crud(GRADERS, STAFF_READERS, GRADERS, ADMIN_ONLY),
    "grades": _crud(GRADERS, STAFF_READERS, GRADERS, ADMIN_ONLY),
    "notifications": _crud(frozenset({"ADMIN", "STAFF"}), ALL_ROLES, ALL_ROLES, ALL_ROLES),
    "users": _crud(ADMIN_ONLY, ADMIN_ONLY, ADMIN_ONLY, ADMIN_ONLY),
}


def can(user: CurrentUser, action: str, resource: str) -> bool:
    if user.role == "ADMIN":
        return True
    allowed = CAPABILITIES.get(resource, {}).get(action)
    return bool(allowed) and user.role in allowed


def check_permission(resource: str, action: str):
    """
    Dependency factory to enforce a capability.

    Example:
        Depends(check_permission("courses", "create"))
    """

    async def _checker(current_user: CurrentUser = Depends(get_current_user)) -> None:
        if not can(current_user, action, resource):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )

    return _checker


async def ensure_teaches_class(db, current_user: CurrentUser, klass) -> None:
    """Teachers may only record attendance and grades for classes assigned to them."""
    if current_user.role != "TEACHER":
        return
    teacher_id = await get_teacher_id_for_user(db, current_user)
    if teacher_id is None or klass.teacher_id != teacher_id:
        raise ServiceError("You can only record for classes assigned to you", status.HTTP_403_FORBIDDEN)
