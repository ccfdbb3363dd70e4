# backend/kurdmed/models/medication.py

from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

Language = Literal["en", "ku"]
SUPPORTED_LANGUAGES = ("en", "ku")


class IdentificationMethod(str, Enum):
    PACKAGING = "packaging"
    NAME = "name"
    CHATBOT = "chatbot"


class MedicationStatus(str, Enum):
    IDENTIFIED = "identified"
    UNIDENTIFIED = "unidentified"
    ERROR = "error"


class MedicationRecord(BaseModel):
    """Normalized medication information for one identification request.

    ``status`` is decided once, when the record is built:
    ``identified`` when the model named a medication, ``unidentified`` when it
    answered but could not identify one (``description`` holds the reason) and
    ``error`` when the exchange itself failed (``raw_text`` holds the notice).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: Optional[str] = None
    description: Optional[str] = None
    active_ingredients: Optional[List[str]] = Field(None, alias="activeIngredients")
    dosage: Optional[str] = None
    uses: Optional[List[str]] = None
    side_effects: Optional[List[str]] = Field(None, alias="sideEffects")
    disclaimer: Optional[str] = None
    raw_text: Optional[str] = Field(None, alias="rawText")
    status: MedicationStatus = MedicationStatus.UNIDENTIFIED

    @model_validator(mode="after")
    def _named_when_identified(self) -> "MedicationRecord":
        if self.status == MedicationStatus.IDENTIFIED and not self.name:
            raise ValueError("an identified record needs a name")
        return self

    @property
    def is_identified(self) -> bool:
        return self.status == MedicationStatus.IDENTIFIED

    @property
    def reason(self) -> Optional[str]:
        """Why identification did not succeed, if it did not."""
        if self.status == MedicationStatus.ERROR:
            return self.raw_text
        if self.status == MedicationStatus.UNIDENTIFIED:
            return self.description
        return None


class ConversationTurn(BaseModel):
    sender: Literal["user", "model"]
    text: str = ""


class NameSearchRequest(BaseModel):
    name: str
    language: Language = "en"
    prompt: Optional[str] = None


class ChatMessageRequest(BaseModel):
    message: str
    language: Language = "en"


class ChatStartRequest(BaseModel):
    language: Language = "en"


class ChatTranscript(BaseModel):
    session_id: str
    language: Optional[Language] = None
    turns: List[ConversationTurn] = []


class MedicationCard(BaseModel):
    """What the front end renders for a record."""

    status: MedicationStatus
    title: str
    message: Optional[str] = None
    labels: dict = {}


class IdentificationResponse(BaseModel):
    method: IdentificationMethod
    record: MedicationRecord
    card: MedicationCard
