from __future__ import annotations

from dataclasses import dataclass

from coursehub.models.user import Role


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated identity extracted from a validated access token.

    Carried through the request via FastAPI's dependency system.
    ``user_id`` is the token subject; ``role`` is the role the user held
    when the token was issued.
    """

    user_id: str
    role: Role

    def has_role(self, role: Role) -> bool:
        return self.role == role

    def has_any_role(self, roles: set[Role]) -> bool:
        return self.role in roles

    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def can_manage(self, owner_id: object) -> bool:
        """Owner-or-admin capability shared by every mutating operation."""
        return self.is_admin() or str(owner_id) == self.user_id
