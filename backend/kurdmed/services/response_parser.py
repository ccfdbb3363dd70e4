# backend/kurdmed/services/response_parser.py

import json
import logging
import re
from typing import Any, Dict, List, Optional

from kurdmed.models import MedicationRecord, MedicationStatus

logger = logging.getLogger(__name__)

INVALID_FORMAT_DESCRIPTION = "The AI returned an invalid format. Please try again."
GENERIC_DISCLAIMER = (
    "This is an informational tool. Always consult a healthcare professional for medical advice."
)

_OPENING_FENCE = re.compile(r"^\s*```(?:json)?[ \t]*\n?", re.IGNORECASE)
_CLOSING_FENCE = re.compile(r"\n?[ \t]*```\s*$")

_TEXT_FIELDS = ("name", "description", "dosage", "disclaimer")
_LIST_FIELDS = ("activeIngredients", "uses", "sideEffects")


def strip_code_fence(text: str) -> str:
    cleaned = _OPENING_FENCE.sub("", text, count=1)
    cleaned = _CLOSING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def _as_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    return str(value)


def _as_list(value: Any) -> Optional[List[str]]:
    if value is None:
        return None
    if isinstance(value, list):
        return [item if isinstance(item, str) else str(item) for item in value]
    return [_as_text(value)]


def _record_from_object(parsed: Dict[str, Any], clean_text: str) -> MedicationRecord:
    fields: Dict[str, Any] = {"rawText": clean_text}
    for key in _TEXT_FIELDS:
        if key in parsed:
            fields[key] = _as_text(parsed[key])
    for key in _LIST_FIELDS:
        if key in parsed:
            fields[key] = _as_list(parsed[key])

    name = fields.get("name")
    identified = bool(name and name.strip())
    fields["status"] = MedicationStatus.IDENTIFIED if identified else MedicationStatus.UNIDENTIFIED
    return MedicationRecord(**fields)


def invalid_format_record(raw_text: str) -> MedicationRecord:
    return MedicationRecord(
        name="",
        description=INVALID_FORMAT_DESCRIPTION,
        disclaimer=GENERIC_DISCLAIMER,
        rawText=raw_text,
        status=MedicationStatus.ERROR,
    )


def parse_medication_response(raw_text: Optional[str]) -> MedicationRecord:
    """Normalize raw model output into a ``MedicationRecord``.

    Never raises: anything that is not a JSON document comes back as an
    ``error`` record carrying the unmodified input in ``raw_text``.
    """
    raw_text = raw_text or ""
    try:
        clean_text = strip_code_fence(raw_text)
        parsed = json.loads(clean_text)
        if isinstance(parsed, dict):
            return _record_from_object(parsed, clean_text)
        return MedicationRecord(rawText=clean_text)
    except (ValueError, TypeError, RecursionError) as e:
        logger.warning("Failed to parse JSON response: %s", e)
        return invalid_format_record(raw_text)
