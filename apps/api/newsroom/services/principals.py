"""Principal resolution against the role-specific account stores."""

from newsroom.errors import not_found
from newsroom.repositories.memory import AdminRecord, InMemoryStore, UserRecord
from newsroom.schemas.auth import AdminPrincipal, Role, RoleRequirement, UserPrincipal

# Admin is consulted first so an id present in both stores resolves to the admin.
_LOOKUP_ORDER: dict[RoleRequirement, tuple[Role, ...]] = {
    RoleRequirement.ADMIN: (Role.ADMIN,),
    RoleRequirement.USER: (Role.USER,),
    RoleRequirement.ADMIN_OR_USER: (Role.ADMIN, Role.USER),
}

_NOT_FOUND_MESSAGES: dict[RoleRequirement, str] = {
    RoleRequirement.ADMIN: "Admin not found",
    RoleRequirement.USER: "User not found",
    RoleRequirement.ADMIN_OR_USER: "Account not found",
}


def admin_principal(record: AdminRecord) -> AdminPrincipal:
    return AdminPrincipal(
        id=record.id,
        username=record.username,
        email=record.email,
        created_at=record.created_at,
    )


def user_principal(record: UserRecord) -> UserPrincipal:
    return UserPrincipal(
        id=record.id,
        username=record.username,
        email=record.email,
        created_at=record.created_at,
    )


class PrincipalResolver:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def resolve(self, principal_id: str, requirement: RoleRequirement) -> AdminPrincipal | UserPrincipal:
        """Look the id up in the stores the requirement allows, in order.

        Raises a ``NOT_FOUND`` ServiceError when no store knows the id. Storage
        faults propagate unchanged as ``PersistenceError``.
        """
        if requirement not in _LOOKUP_ORDER:
            raise ValueError(f"Requirement {requirement.value} does not resolve a principal")

        for role in _LOOKUP_ORDER[requirement]:
            principal = self._lookup(role, principal_id)
            if principal is not None:
                return principal

        raise not_found(_NOT_FOUND_MESSAGES[requirement])

    def _lookup(self, role: Role, principal_id: str) -> AdminPrincipal | UserPrincipal | None:
        if role is Role.ADMIN:
            admin = self._store.get_admin(principal_id)
            return admin_principal(admin) if admin is not None else None

        user = self._store.get_user(principal_id)
        return user_principal(user) if user is not None else None
