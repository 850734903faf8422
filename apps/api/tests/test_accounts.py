"""Registration, login and credential management tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
import inspect
import os
import threading
import unittest
from unittest.mock import patch

from fastapi.routing import APIRoute
from fastapi.testclient import TestClient

from newsroom.adapters.auth import JwtTokenService
from newsroom.adapters.hashing import BcryptCredentialHasher
from newsroom.core.config import Settings, get_settings
from newsroom.core.logging_safety import safe_log_email
from newsroom.main import create_app

_SECRET = "test-jwt-secret-0123456789abcdef0123456789"


class _SettingsEnvCase(unittest.TestCase):
    _env_keys = (
        "NEWSROOM_JWT_SECRET",
        "NEWSROOM_BCRYPT_ROUNDS",
        "NEWSROOM_ALLOW_ADMIN_REGISTRATION",
        "NEWSROOM_TOKEN_TTL_HOURS",
    )

    def setUp(self) -> None:
        self._old_env = {k: os.environ.get(k) for k in self._env_keys}
        os.environ["NEWSROOM_JWT_SECRET"] = _SECRET
        os.environ["NEWSROOM_BCRYPT_ROUNDS"] = "4"
        os.environ.pop("NEWSROOM_ALLOW_ADMIN_REGISTRATION", None)
        os.environ.pop("NEWSROOM_TOKEN_TTL_HOURS", None)
        get_settings.cache_clear()

    def tearDown(self) -> None:
        for key, value in self._old_env.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
        get_settings.cache_clear()


def _credentials(name: str, password: str = "secret-pass") -> dict[str, str]:
    return {"username": name, "email": f"{name}@example.com", "password": password}


class AccountApiTests(_SettingsEnvCase):
    def setUp(self) -> None:
        super().setUp()
        self.app = create_app()
        self.client = TestClient(self.app)

    def test_user_registration_returns_session_without_credential(self) -> None:
        response = self.client.post("/api/users/register", json=_credentials("reporter"))

        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["message"], "User registered successfully")
        session = body["data"]
        self.assertEqual(session["token_type"], "bearer")
        self.assertEqual(session["account"]["role"], "user")
        self.assertEqual(session["account"]["email"], "reporter@example.com")
        self.assertNotIn("password", session["account"])
        self.assertNotIn("password_hash", session["account"])

        claims = JwtTokenService(_SECRET).verify(session["token"])
        self.assertEqual(claims.principal_id, session["account"]["id"])

    def test_stored_credential_is_a_hash(self) -> None:
        self.client.post("/api/users/register", json=_credentials("reporter"))

        record = next(iter(self.app.state.store.users.values()))
        self.assertNotEqual(record.password_hash, "secret-pass")
        self.assertTrue(BcryptCredentialHasher(rounds=4).compare("secret-pass", record.password_hash))

    def test_email_is_normalized_for_registration_and_login(self) -> None:
        payload = {"username": "mixed", "email": "  Mixed.Case@Example.COM ", "password": "secret-pass"}
        registered = self.client.post("/api/users/register", json=payload)
        self.assertEqual(registered.json()["data"]["account"]["email"], "mixed.case@example.com")

        login = self.client.post(
            "/api/users/login",
            json={"email": "MIXED.case@example.com", "password": "secret-pass"},
        )
        self.assertEqual(login.status_code, 200)
        self.assertEqual(login.json()["message"], "Login successful")

    def test_duplicate_user_is_conflict(self) -> None:
        self.client.post("/api/users/register", json=_credentials("reporter"))
        writes_before = self.app.state.store.principal_write_count

        same_email = self.client.post(
            "/api/users/register",
            json={**_credentials("someone-else"), "email": "reporter@example.com"},
        )
        same_username = self.client.post(
            "/api/users/register",
            json={**_credentials("reporter"), "email": "fresh@example.com"},
        )

        for response in (same_email, same_username):
            self.assertEqual(response.status_code, 409)
            self.assertEqual(response.json()["error"]["code"], "ACCOUNT_EXISTS")
        self.assertEqual(len(self.app.state.store.users), 1)
        self.assertEqual(self.app.state.store.principal_write_count, writes_before)

    def test_same_email_may_exist_in_both_role_stores(self) -> None:
        user = self.client.post("/api/users/register", json=_credentials("shared"))
        admin = self.client.post("/api/admin/register", json=_credentials("shared"))

        self.assertEqual(user.status_code, 201)
        self.assertEqual(admin.status_code, 201)
        self.assertEqual(admin.json()["data"]["account"]["role"], "admin")

        admin_login = self.client.post(
            "/api/admin/login",
            json={"email": "shared@example.com", "password": "secret-pass"},
        )
        self.assertEqual(admin_login.status_code, 200)
        self.assertEqual(admin_login.json()["data"]["account"]["id"], admin.json()["data"]["account"]["id"])

    def test_wrong_password_and_unknown_email_share_one_response(self) -> None:
        self.client.post("/api/users/register", json=_credentials("reporter"))

        wrong_password = self.client.post(
            "/api/users/login",
            json={"email": "reporter@example.com", "password": "not-the-password"},
        )
        unknown_email = self.client.post(
            "/api/users/login",
            json={"email": "ghost@example.com", "password": "secret-pass"},
        )

        self.assertEqual(wrong_password.status_code, 401)
        self.assertEqual(wrong_password.json(), unknown_email.json())
        self.assertEqual(wrong_password.json()["error"]["code"], "INVALID_CREDENTIALS")

    def test_user_credentials_do_not_log_into_admin_surface(self) -> None:
        self.client.post("/api/users/register", json=_credentials("reporter"))

        response = self.client.post(
            "/api/admin/login",
            json={"email": "reporter@example.com", "password": "secret-pass"},
        )

        self.assertEqual(response.status_code, 401)

    def test_registration_payload_validation(self) -> None:
        cases = [
            {"username": "short", "email": "short@example.com", "password": "12345"},
            {"username": "bad-mail", "email": "not-an-email", "password": "secret-pass"},
            {"username": "   ", "email": "blank@example.com", "password": "secret-pass"},
            {"username": "long", "email": "long@example.com", "password": "x" * 73},
            {"email": "missing@example.com", "password": "secret-pass"},
        ]
        for payload in cases:
            with self.subTest(payload=payload):
                response = self.client.post("/api/users/register", json=payload)
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json()["error"]["code"], "VALIDATION_ERROR")
                self.assertIn("errors", response.json()["error"]["details"])
        self.assertEqual(self.app.state.store.users, {})

    def test_admin_registration_can_be_disabled(self) -> None:
        os.environ["NEWSROOM_ALLOW_ADMIN_REGISTRATION"] = "false"
        get_settings.cache_clear()

        response = self.client.post("/api/admin/register", json=_credentials("intruder"))

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["error"]["code"], "ADMIN_REGISTRATION_DISABLED")
        self.assertEqual(self.app.state.store.admins, {})

    def test_change_password_rotates_credential(self) -> None:
        token = self.client.post("/api/users/register", json=_credentials("reporter")).json()["data"]["token"]
        headers = {"Authorization": f"Bearer {token}"}

        wrong = self.client.put(
            "/api/users/password",
            headers=headers,
            json={"current_password": "guess-again", "new_password": "brand-new-pass"},
        )
        self.assertEqual(wrong.status_code, 401)
        self.assertEqual(wrong.json()["message"], "Current password is incorrect")

        changed = self.client.put(
            "/api/users/password",
            headers=headers,
            json={"current_password": "secret-pass", "new_password": "brand-new-pass"},
        )
        self.assertEqual(changed.status_code, 200)
        self.assertEqual(changed.json()["message"], "Password changed successfully")

        old_login = self.client.post(
            "/api/users/login",
            json={"email": "reporter@example.com", "password": "secret-pass"},
        )
        new_login = self.client.post(
            "/api/users/login",
            json={"email": "reporter@example.com", "password": "brand-new-pass"},
        )
        self.assertEqual(old_login.status_code, 401)
        self.assertEqual(new_login.status_code, 200)

    def test_session_lifetime_follows_configuration(self) -> None:
        os.environ["NEWSROOM_TOKEN_TTL_HOURS"] = "2"
        get_settings.cache_clear()
        before = datetime.now(UTC)

        response = self.client.post("/api/users/register", json=_credentials("reporter"))

        expires_at = datetime.fromisoformat(response.json()["data"]["expires_at"])
        self.assertLessEqual(expires_at, before + timedelta(hours=2, seconds=5))
        self.assertGreater(expires_at, before + timedelta(hours=1, minutes=59))

    def test_account_me_requires_a_token(self) -> None:
        response = self.client.get("/api/account/me")

        self.assertEqual(response.status_code, 401)

    def test_credential_hashing_runs_off_the_event_loop_thread(self) -> None:
        threads: dict[str, int] = {}
        original_hash = BcryptCredentialHasher.hash

        @self.app.get("/loop-thread")
        async def loop_thread() -> dict[str, int]:
            return {"ident": threading.get_ident()}

        def recording_hash(hasher: BcryptCredentialHasher, secret: str) -> str:
            threads["hash"] = threading.get_ident()
            return original_hash(hasher, secret)

        # One portal keeps a single event loop thread for both requests.
        with TestClient(self.app) as client, patch.object(BcryptCredentialHasher, "hash", recording_hash):
            response = client.post("/api/users/register", json=_credentials("reporter"))
            loop_ident = client.get("/loop-thread").json()["ident"]

        self.assertEqual(response.status_code, 201)
        self.assertNotEqual(threads["hash"], loop_ident)

    def test_credential_endpoints_are_synchronous(self) -> None:
        credential_routes = {
            ("POST", "/api/admin/register"),
            ("POST", "/api/admin/login"),
            ("POST", "/api/users/register"),
            ("POST", "/api/users/login"),
            ("PUT", "/api/users/password"),
        }
        seen = set()
        for route in self.app.routes:
            if not isinstance(route, APIRoute):
                continue
            for method in route.methods:
                if (method, route.path) in credential_routes:
                    seen.add((method, route.path))
                    with self.subTest(path=route.path):
                        self.assertFalse(inspect.iscoroutinefunction(route.endpoint))

        self.assertEqual(seen, credential_routes)


class SettingsUnitTests(_SettingsEnvCase):
    def test_defaults_and_overrides(self) -> None:
        settings = get_settings()

        self.assertEqual(settings.jwt_secret, _SECRET)
        self.assertEqual(settings.jwt_algorithm, "HS256")
        self.assertEqual(settings.token_ttl_hours, 24)
        self.assertEqual(settings.bcrypt_rounds, 4)
        self.assertTrue(settings.allow_admin_registration)

    def test_missing_secret_is_a_configuration_error(self) -> None:
        os.environ.pop("NEWSROOM_JWT_SECRET", None)

        with self.assertRaises(ValueError):
            Settings()

    def test_bcrypt_rounds_are_bounded(self) -> None:
        os.environ["NEWSROOM_BCRYPT_ROUNDS"] = "3"

        with self.assertRaises(ValueError):
            Settings()


class CredentialHasherUnitTests(unittest.TestCase):
    def test_hash_is_salted_and_verifiable(self) -> None:
        hasher = BcryptCredentialHasher(rounds=4)

        first = hasher.hash("secret-pass")
        second = hasher.hash("secret-pass")

        self.assertNotEqual(first, second)
        self.assertTrue(hasher.compare("secret-pass", first))
        self.assertFalse(hasher.compare("wrong-pass", first))

    def test_compare_against_garbage_digest_is_false(self) -> None:
        self.assertFalse(BcryptCredentialHasher(rounds=4).compare("secret-pass", "not-a-bcrypt-digest"))

    def test_log_email_keeps_domain_only(self) -> None:
        masked = safe_log_email("Reporter@Example.com")

        self.assertTrue(masked.endswith("@example.com"))
        self.assertNotIn("reporter", masked)


if __name__ == "__main__":
    unittest.main()
