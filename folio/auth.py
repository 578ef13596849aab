"""
Admin authentication on top of Firebase Auth.

Password sign-in goes through the Identity Toolkit REST endpoint; the ID token
it returns is exchanged for a Firebase session cookie that the admin pages
verify on every request.
"""

from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Optional, Protocol

import requests

from folio.errors import AuthError

logger = logging.getLogger(__name__)

SIGN_IN_URL = "https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword"
REQUEST_TIMEOUT_SECONDS = 30

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password. Please try again."
_ERROR_MESSAGES = {
    "INVALID_PASSWORD": INVALID_CREDENTIALS_MESSAGE,
    "EMAIL_NOT_FOUND": INVALID_CREDENTIALS_MESSAGE,
    "INVALID_LOGIN_CREDENTIALS": INVALID_CREDENTIALS_MESSAGE,
    "INVALID_EMAIL": "The email address is not valid.",
    "USER_DISABLED": "This user account has been disabled.",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "Too many failed attempts. Please try again later.",
}
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred during login."


@dataclass
class AdminUser:
    uid: str
    email: str


def message_for_error_code(code: str) -> str:
    # Identity Toolkit codes may carry a suffix, e.g. "TOO_MANY_ATTEMPTS_TRY_LATER : ...".
    key = (code or "").split(":")[0].strip()
    return _ERROR_MESSAGES.get(key, UNKNOWN_ERROR_MESSAGE)


class AuthClient(Protocol):
    def sign_in_with_password(self, email: str, password: str) -> str:
        ...

    def create_session_cookie(self, id_token: str, expires_in: timedelta) -> str:
        ...

    def verify_session_cookie(self, cookie: str) -> AdminUser:
        ...

    def revoke(self, uid: str) -> None:
        ...


class FirebaseAuthClient:
    """Firebase Auth via the REST sign-in endpoint and firebase_admin.auth."""

    def __init__(self, web_api_key: Optional[str], session: Optional[requests.Session] = None):
        self.web_api_key = web_api_key
        self.http = session or requests.Session()

    def sign_in_with_password(self, email: str, password: str) -> str:
        if not self.web_api_key:
            raise AuthError("Sign-in is not configured (FIREBASE_WEB_API_KEY missing).")
        try:
            response = self.http.post(
                SIGN_IN_URL,
                params={"key": self.web_api_key},
                json={"email": email, "password": password, "returnSecureToken": True},
                timeout=REQUEST_TIMEOUT_SECONDS,
            )
        except requests.RequestException as exc:
            logger.error("Identity Toolkit request failed: %s", exc)
            raise AuthError(UNKNOWN_ERROR_MESSAGE) from exc

        payload = response.json() if response.content else {}
        if response.status_code != 200:
            code = (payload.get("error") or {}).get("message", "")
            if message_for_error_code(code) == UNKNOWN_ERROR_MESSAGE:
                logger.error("Firebase Auth error: %s", code or response.status_code)
            raise AuthError(message_for_error_code(code))
        return payload["idToken"]

    def create_session_cookie(self, id_token: str, expires_in: timedelta) -> str:
        from firebase_admin import auth, exceptions

        try:
            return auth.create_session_cookie(id_token, expires_in=expires_in)
        except (exceptions.FirebaseError, ValueError) as exc:
            logger.error("Failed to create session cookie: %s", exc)
            raise AuthError("Could not create an admin session.") from exc

    def verify_session_cookie(self, cookie: str) -> AdminUser:
        from firebase_admin import auth, exceptions

        try:
            claims = auth.verify_session_cookie(cookie, check_revoked=True)
        except (exceptions.FirebaseError, ValueError) as exc:
            raise AuthError("Session expired or invalid.") from exc
        return AdminUser(uid=claims["uid"], email=(claims.get("email") or "").lower())

    def revoke(self, uid: str) -> None:
        from firebase_admin import auth

        auth.revoke_refresh_tokens(uid)


@dataclass
class InMemoryAuthClient:
    """User table and opaque session cookies for development and tests."""

    users: dict = field(default_factory=dict)  # email -> (uid, password, disabled)
    id_tokens: dict = field(default_factory=dict)  # token -> AdminUser
    sessions: dict = field(default_factory=dict)  # cookie -> (AdminUser, expires_at)

    def add_user(self, email: str, password: str, *, uid: Optional[str] = None, disabled: bool = False) -> str:
        uid = uid or secrets.token_hex(8)
        self.users[email.lower()] = (uid, password, disabled)
        return uid

    def sign_in_with_password(self, email: str, password: str) -> str:
        record = self.users.get(email.lower())
        if record is None or record[1] != password:
            raise AuthError(INVALID_CREDENTIALS_MESSAGE)
        uid, _, disabled = record
        if disabled:
            raise AuthError(_ERROR_MESSAGES["USER_DISABLED"])
        token = secrets.token_urlsafe(16)
        self.id_tokens[token] = AdminUser(uid=uid, email=email.lower())
        return token

    def create_session_cookie(self, id_token: str, expires_in: timedelta) -> str:
        user = self.id_tokens.pop(id_token, None)
        if user is None:
            raise AuthError("Could not create an admin session.")
        cookie = secrets.token_urlsafe(24)
        self.sessions[cookie] = (user, time.time() + expires_in.total_seconds())
        return cookie

    def verify_session_cookie(self, cookie: str) -> AdminUser:
        entry = self.sessions.get(cookie or "")
        if entry is None or entry[1] < time.time():
            raise AuthError("Session expired or invalid.")
        return entry[0]

    def revoke(self, uid: str) -> None:
        self.sessions = {
            cookie: entry for cookie, entry in self.sessions.items() if entry[0].uid != uid
        }

    def reset(self) -> None:
        self.users.clear()
        self.id_tokens.clear()
        self.sessions.clear()
