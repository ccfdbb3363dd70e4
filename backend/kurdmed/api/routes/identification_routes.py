# backend/kurdmed/api/routes/identification_routes.py

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool

from kurdmed.api.deps import get_current_user, get_medication_service, translator_dep
from kurdmed.models import IdentificationMethod, IdentificationResponse, Language, NameSearchRequest, User
from kurdmed.services.i18n import Translator
from kurdmed.services.image_encoder import ImageEncodingError, validate_image
from kurdmed.services.medication_service import MedicationService
from kurdmed.services.presentation import present_record
from kurdmed.services.prompt_builder import build_name_prompt, default_image_prompt

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/identify", tags=["identification"])


@router.post("/image", response_model=IdentificationResponse)
async def identify_by_image(
    image: Optional[UploadFile] = File(None),
    language: Language = Form("en"),
    prompt: Optional[str] = Form(None),
    service: MedicationService = Depends(get_medication_service),
    translator: Translator = Depends(translator_dep),
    user: Optional[User] = Depends(get_current_user),
):
    """Identify a medication from a packaging photo."""
    if image is None:
        raise HTTPException(status_code=400, detail=translator.t("imageIdentifier.error.selectImage", language))

    image_bytes = await image.read()
    mime_type = image.content_type or ""
    try:
        validate_image(image_bytes, mime_type)
    except ImageEncodingError as e:
        logger.info("Rejected upload %r: %s", image.filename, e)
        raise HTTPException(status_code=400, detail=translator.t("imageIdentifier.error.selectImage", language))

    prompt = prompt or default_image_prompt(language, translator)
    record = await run_in_threadpool(service.identify_with_image, image_bytes, mime_type, prompt, language)
    return IdentificationResponse(
        method=IdentificationMethod.PACKAGING,
        record=record,
        card=present_record(record, language, translator),
    )


@router.post("/name", response_model=IdentificationResponse)
def identify_by_name(
    body: NameSearchRequest,
    service: MedicationService = Depends(get_medication_service),
    translator: Translator = Depends(translator_dep),
    user: Optional[User] = Depends(get_current_user),
):
    """Identify a medication from its brand or generic name."""
    name = body.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail=translator.t("nameSearch.error.enterName", body.language))

    prompt = body.prompt or build_name_prompt(name, body.language, translator)
    record = service.identify_with_name(name, prompt, body.language)
    return IdentificationResponse(
        method=IdentificationMethod.NAME,
        record=record,
        card=present_record(record, body.language, translator),
    )
