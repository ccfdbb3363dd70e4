# backend/kurdmed/services/auth.py

import logging
import threading
from collections import OrderedDict
from typing import Callable, List, Optional

import requests

from kurdmed.models import User
from kurdmed.services.i18n import Translator, get_translator

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"

POPUP_CLOSED = "auth/popup-closed-by-user"
POPUP_BLOCKED = "auth/popup-blocked"
NOT_CONFIGURED = "auth/not-configured"

# Identity Toolkit error messages -> client SDK style codes
_FIREBASE_ERROR_CODES = {
    "INVALID_IDP_RESPONSE": "auth/invalid-credential",
    "INVALID_ID_TOKEN": "auth/invalid-id-token",
    "TOKEN_EXPIRED": "auth/id-token-expired",
    "USER_DISABLED": "auth/user-disabled",
    "USER_NOT_FOUND": "auth/user-not-found",
}


class AuthError(Exception):
    def __init__(self, code: str, message: str = ""):
        super().__init__(message or code)
        self.code = code
        self.message = message


def describe_auth_error(
    code: Optional[str],
    message: Optional[str] = None,
    language: str = "en",
    translator: Optional[Translator] = None,
) -> str:
    translator = translator or get_translator()
    if code == POPUP_CLOSED:
        return translator.translate("auth.error.popupClosed", language)
    if code == POPUP_BLOCKED:
        return translator.translate("auth.error.popupBlocked", language)
    return message or translator.translate("auth.error.unexpected", language)


class FirebaseRestProvider:
    """Google sign-in and token lookup through the Identity Toolkit REST API."""

    def __init__(self, api_key: str, request_uri: str, timeout: float = 10):
        self.api_key = api_key
        self.request_uri = request_uri
        self.timeout = timeout

    def _post(self, method: str, payload: dict) -> dict:
        try:
            resp = requests.post(
                f"{IDENTITY_TOOLKIT_URL}/accounts:{method}",
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise AuthError("auth/network-request-failed", str(e)) from e

        try:
            data = resp.json() if resp.content else {}
        except ValueError:
            data = {}
        if resp.status_code != 200:
            reason = (data.get("error") or {}).get("message", f"HTTP {resp.status_code}")
            # Messages look like "TOKEN_EXPIRED : details"
            key = reason.split(":")[0].strip()
            raise AuthError(_FIREBASE_ERROR_CODES.get(key, "auth/internal-error"), reason)
        return data

    def sign_in_with_id_token(self, google_id_token: str) -> User:
        data = self._post(
            "signInWithIdp",
            {
                "postBody": f"id_token={google_id_token}&providerId=google.com",
                "requestUri": self.request_uri,
                "returnSecureToken": True,
            },
        )
        return User(
            uid=data["localId"],
            email=data.get("email"),
            displayName=data.get("displayName"),
            idToken=data.get("idToken"),
        )

    def lookup(self, id_token: str) -> Optional[User]:
        try:
            data = self._post("lookup", {"idToken": id_token})
        except AuthError as e:
            logger.info("Token lookup rejected: %s", e.code)
            return None
        users = data.get("users") or []
        if not users:
            return None
        info = users[0]
        return User(
            uid=info["localId"],
            email=info.get("email"),
            displayName=info.get("displayName"),
            idToken=id_token,
        )


class UnconfiguredProvider:
    """Stand-in used when no Firebase API key is set; nobody can sign in."""

    def sign_in_with_id_token(self, google_id_token: str) -> User:
        raise AuthError(
            NOT_CONFIGURED,
            "Firebase is not configured. Please set FIREBASE_API_KEY.",
        )

    def lookup(self, id_token: str) -> Optional[User]:
        return None


def create_provider(api_key: str, request_uri: str):
    if not api_key or api_key.startswith("YOUR_"):
        logger.warning("Firebase config is not set. Authentication will be disabled.")
        return UnconfiguredProvider()
    return FirebaseRestProvider(api_key, request_uri)


AuthListener = Callable[[Optional[User]], None]


class AuthSession:
    """Current-user state for one client, with change notifications."""

    def __init__(self, provider):
        self.provider = provider
        self._user: Optional[User] = None
        self._listeners: List[AuthListener] = []

    @property
    def current_user(self) -> Optional[User]:
        return self._user

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        """Register ``listener`` and call it right away with the current user."""
        self._listeners.append(listener)
        listener(self._user)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_user(self, user: Optional[User]) -> None:
        self._user = user
        for listener in list(self._listeners):
            listener(user)

    def sign_in(self, google_id_token: str) -> User:
        user = self.provider.sign_in_with_id_token(google_id_token)
        self._set_user(user)
        return user

    def sign_out(self) -> None:
        self._set_user(None)


class AuthSessionRegistry:
    """Signed-in sessions keyed by the ID token handed back to the browser.

    At most ``max_sessions`` are kept; the least recently resolved session is
    forgotten first and later requests fall back to a provider lookup.
    """

    def __init__(self, provider, max_sessions: int = 1000):
        self.provider = provider
        self.max_sessions = max_sessions
        self._sessions: "OrderedDict[str, AuthSession]" = OrderedDict()
        self._lock = threading.RLock()

    def sign_in(self, google_id_token: str) -> User:
        session = AuthSession(self.provider)
        user = session.sign_in(google_id_token)
        token = user.id_token or google_id_token

        def forget(current: Optional[User]) -> None:
            if current is None:
                with self._lock:
                    self._sessions.pop(token, None)

        session.subscribe(forget)
        with self._lock:
            self._sessions[token] = session
            while len(self._sessions) > self.max_sessions:
                self._sessions.popitem(last=False)
        return user

    def sign_out(self, id_token: str) -> None:
        with self._lock:
            session = self._sessions.get(id_token)
        if session is not None:
            session.sign_out()

    def resolve(self, id_token: str) -> Optional[User]:
        with self._lock:
            session = self._sessions.get(id_token)
            if session is not None:
                self._sessions.move_to_end(id_token)
        if session is not None and session.current_user is not None:
            return session.current_user
        return self.provider.lookup(id_token)

    def __len__(self) -> int:
        return len(self._sessions)
