from __future__ import annotations

from readyforms.db.models.template import Template
from readyforms.db.models.user import User


def is_admin(user: User | None) -> bool:
    return bool(user is not None and user.is_admin)


def is_owner_or_admin(user: User | None, owner_id) -> bool:
    if user is None:
        return False
    return user.id == owner_id or bool(user.is_admin)


def can_view_template(template: Template, user: User | None) -> bool:
    if template.is_public:
        return True
    if user is None:
        return False
    if is_owner_or_admin(user, template.user_id):
        return True
    allowed = {str(x).strip().lower() for x in (template.allowed_users or [])}
    return str(user.id).lower() in allowed or (user.email or "").lower() in allowed
