"""Pydantic models for the Kurd Med backend."""

from .account import Preferences, PreferencesUpdate, SignInRequest, User
from .medication import (
    SUPPORTED_LANGUAGES,
    ChatMessageRequest,
    ChatStartRequest,
    ChatTranscript,
    ConversationTurn,
    IdentificationMethod,
    IdentificationResponse,
    Language,
    MedicationCard,
    MedicationRecord,
    MedicationStatus,
    NameSearchRequest,
)

__all__ = [
    "ChatMessageRequest",
    "ChatStartRequest",
    "ChatTranscript",
    "ConversationTurn",
    "IdentificationMethod",
    "IdentificationResponse",
    "Language",
    "MedicationCard",
    "MedicationRecord",
    "MedicationStatus",
    "NameSearchRequest",
    "Preferences",
    "PreferencesUpdate",
    "SUPPORTED_LANGUAGES",
    "SignInRequest",
    "User",
]
