"""Registration, login and credential management for both principal stores."""

import logging

from newsroom.adapters.auth import TokenService
from newsroom.adapters.hashing import CredentialHasher
from newsroom.core.logging_safety import safe_log_email, safe_log_identifier
from newsroom.errors import FailureKind, ServiceError, forbidden
from newsroom.repositories.memory import AdminRecord, InMemoryStore, UserRecord
from newsroom.schemas.auth import (
    Account,
    AdminPrincipal,
    AuthSession,
    ChangePasswordRequest,
    LoginRequest,
    RegisterRequest,
    Role,
    UserPrincipal,
)

logger = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def _invalid_credentials() -> ServiceError:
    return ServiceError(FailureKind.UNAUTHENTICATED, "Invalid credentials", code="INVALID_CREDENTIALS")


def to_account(record: AdminRecord | UserRecord, role: Role) -> Account:
    return Account(
        id=record.id,
        username=record.username,
        email=record.email,
        role=role,
        created_at=record.created_at,
    )


def principal_to_account(principal: AdminPrincipal | UserPrincipal) -> Account:
    return Account(
        id=principal.id,
        username=principal.username,
        email=principal.email,
        role=principal.role,
        created_at=principal.created_at,
    )


class AccountService:
    def __init__(
        self,
        store: InMemoryStore,
        hasher: CredentialHasher,
        tokens: TokenService,
        *,
        allow_admin_registration: bool = True,
    ) -> None:
        self._store = store
        self._hasher = hasher
        self._tokens = tokens
        self._allow_admin_registration = allow_admin_registration

    def register_admin(self, payload: RegisterRequest) -> AuthSession:
        if not self._allow_admin_registration:
            raise forbidden("Admin registration is disabled", code="ADMIN_REGISTRATION_DISABLED")

        email = _normalize_email(payload.email)
        if self._store.find_admin_by_identity(username=payload.username, email=email) is not None:
            raise ServiceError(
                FailureKind.CONFLICT,
                "Admin with this email or username already exists",
                code="ACCOUNT_EXISTS",
            )

        record = self._store.create_admin(
            username=payload.username,
            email=email,
            password_hash=self._hasher.hash(payload.password),
        )
        logger.info("account.registered role=admin principal_id=%s", safe_log_identifier(record.id, prefix="pid"))
        return self._session(record, Role.ADMIN)

    def register_user(self, payload: RegisterRequest) -> AuthSession:
        email = _normalize_email(payload.email)
        if self._store.find_user_by_identity(username=payload.username, email=email) is not None:
            raise ServiceError(
                FailureKind.CONFLICT,
                "User with this email or username already exists",
                code="ACCOUNT_EXISTS",
            )

        record = self._store.create_user(
            username=payload.username,
            email=email,
            password_hash=self._hasher.hash(payload.password),
        )
        logger.info("account.registered role=user principal_id=%s", safe_log_identifier(record.id, prefix="pid"))
        return self._session(record, Role.USER)

    def login_admin(self, payload: LoginRequest) -> AuthSession:
        record = self._store.find_admin_by_email(_normalize_email(payload.email))
        return self._login(record, payload, Role.ADMIN)

    def login_user(self, payload: LoginRequest) -> AuthSession:
        record = self._store.find_user_by_email(_normalize_email(payload.email))
        return self._login(record, payload, Role.USER)

    def change_password(self, *, actor: UserPrincipal, payload: ChangePasswordRequest) -> None:
        record = self._store.get_user(actor.id)
        if record is None:
            raise ServiceError(FailureKind.NOT_FOUND, "User not found", code="RESOURCE_NOT_FOUND")

        if not self._hasher.compare(payload.current_password, record.password_hash):
            raise ServiceError(
                FailureKind.UNAUTHENTICATED,
                "Current password is incorrect",
                code="INVALID_CREDENTIALS",
            )

        self._store.update_user_password(user_id=record.id, password_hash=self._hasher.hash(payload.new_password))
        logger.info("account.password_changed principal_id=%s", safe_log_identifier(record.id, prefix="pid"))

    def _login(self, record: AdminRecord | UserRecord | None, payload: LoginRequest, role: Role) -> AuthSession:
        if record is None or not self._hasher.compare(payload.password, record.password_hash):
            logger.warning(
                "account.login_rejected role=%s email=%s reason=invalid_credentials",
                role.value,
                safe_log_email(payload.email),
            )
            raise _invalid_credentials()

        return self._session(record, role)

    def _session(self, record: AdminRecord | UserRecord, role: Role) -> AuthSession:
        issued = self._tokens.issue(record.id)
        return AuthSession(token=issued.token, expires_at=issued.expires_at, account=to_account(record, role))
