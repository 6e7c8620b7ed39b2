from dataclasses import dataclass
from typing import Optional

from rest_framework.permissions import BasePermission

from schools.models import StaffProfile


@dataclass(frozen=True)
class Actor:
    """Identity and tenant of the caller, resolved once per request."""

    user_id: Optional[int]
    role: Optional[str]
    school_id: Optional[int]

    @property
    def is_super_admin(self) -> bool:
        return self.role == StaffProfile.SUPER_ADMIN

    def scope(self, requested_school_id=None) -> Optional[int]:
        """
        School the caller may read/write. Super admins cross tenants: they get the
        school they asked for, or None (no filter). Everyone else is pinned to theirs.
        """
        if self.is_super_admin:
            return requested_school_id
        return self.school_id


def actor_for(user) -> Actor:
    profile = StaffProfile.objects.filter(user_id=getattr(user, "pk", None)).first()
    if profile is not None:
        return Actor(user_id=user.pk, role=profile.role, school_id=profile.school_id)
    if getattr(user, "is_superuser", False):
        return Actor(user_id=user.pk, role=StaffProfile.SUPER_ADMIN, school_id=None)
    return Actor(user_id=getattr(user, "pk", None), role=None, school_id=None)


class HasRole(BasePermission):
    roles: tuple = ()
    message = "Your role is not authorized to access this route."

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        actor = actor_for(request.user)
        if actor.role is None:
            return False
        if actor.role != StaffProfile.SUPER_ADMIN and actor.school_id is None:
            return False
        return actor.role in self.roles


def role_required(*roles):
    return type("RoleRequired", (HasRole,), {"roles": tuple(roles)})
