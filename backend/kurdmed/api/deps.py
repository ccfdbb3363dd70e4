# backend/kurdmed/api/deps.py

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException

from kurdmed.core.config import settings
from kurdmed.models import User
from kurdmed.services.auth import AuthSessionRegistry, create_provider
from kurdmed.services.chat_service import ConversationStore
from kurdmed.services.i18n import Translator, get_translator
from kurdmed.services.medication_service import MedicationService
from kurdmed.services.preferences import PreferenceStore


@lru_cache(maxsize=1)
def get_medication_service() -> MedicationService:
    return MedicationService()


@lru_cache(maxsize=1)
def get_conversations() -> ConversationStore:
    return ConversationStore(get_medication_service(), get_translator(), settings.MAX_CHAT_SESSIONS)


@lru_cache(maxsize=1)
def get_preference_store() -> PreferenceStore:
    return PreferenceStore(settings.PREFERENCES_PATH, settings.DEFAULT_LANGUAGE)


@lru_cache(maxsize=1)
def get_auth_registry() -> AuthSessionRegistry:
    provider = create_provider(settings.FIREBASE_API_KEY, settings.FIREBASE_REQUEST_URI)
    return AuthSessionRegistry(provider, settings.MAX_AUTH_SESSIONS)


def bearer_token(authorization: Optional[str] = Header(None)) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_user(
    token: Optional[str] = Depends(bearer_token),
    registry: AuthSessionRegistry = Depends(get_auth_registry),
) -> Optional[User]:
    """Resolve the caller; anonymous access is allowed unless REQUIRE_AUTH is set."""
    user = registry.resolve(token) if token else None
    if user is None and settings.REQUIRE_AUTH:
        raise HTTPException(status_code=401, detail="Please sign in to continue.")
    return user


def translator_dep() -> Translator:
    return get_translator()
