# backend/kurdmed/services/presentation.py

from typing import Optional

from kurdmed.models import MedicationCard, MedicationRecord, MedicationStatus
from kurdmed.services.i18n import Translator, get_translator

_SECTION_KEYS = {
    "uses": "pillInfoCard.uses",
    "sideEffects": "pillInfoCard.sideEffects",
    "dosage": "pillInfoCard.dosage",
    "activeIngredients": "pillInfoCard.activeIngredients",
    "disclaimer": "pillInfoCard.disclaimer",
}


def present_record(record: MedicationRecord, language: str, translator: Optional[Translator] = None) -> MedicationCard:
    """Pick the card title, message and section labels for ``record``."""
    translator = translator or get_translator()
    t = translator.translate

    if record.status == MedicationStatus.ERROR:
        # A description means the model answered in a shape we could not read.
        title_key = "pillInfoCard.error.failTitle" if record.description else "pillInfoCard.error.apiTitle"
        return MedicationCard(
            status=record.status,
            title=t(title_key, language),
            message=record.description or record.raw_text,
        )

    if record.status == MedicationStatus.UNIDENTIFIED:
        return MedicationCard(
            status=record.status,
            title=t("pillInfoCard.error.failTitle", language),
            message=record.description or t("pillInfoCard.error.failMessage", language),
        )

    return MedicationCard(
        status=record.status,
        title=record.name,
        message=record.description,
        labels={field: t(key, language) for field, key in _SECTION_KEYS.items()},
    )
