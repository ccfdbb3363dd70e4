# backend/kurdmed/api/routes/account_routes.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response

from kurdmed.api.deps import (
    bearer_token,
    get_auth_registry,
    get_current_user,
    get_preference_store,
    translator_dep,
)
from kurdmed.models import Language, Preferences, PreferencesUpdate, SignInRequest, User
from kurdmed.services.auth import AuthError, AuthSessionRegistry, describe_auth_error
from kurdmed.services.i18n import Translator, text_direction
from kurdmed.services.preferences import PreferenceStore

router = APIRouter(tags=["account"])

ANONYMOUS_CLIENT = "anonymous"


@router.post("/auth/sign-in")
def sign_in(
    body: SignInRequest,
    language: Language = "en",
    registry: AuthSessionRegistry = Depends(get_auth_registry),
    translator: Translator = Depends(translator_dep),
):
    """
    Exchange the Google credential from the browser popup for a session.
    Popup failures reported by the browser are turned into user-facing text.
    """
    if body.error_code:
        raise HTTPException(
            status_code=401,
            detail=describe_auth_error(body.error_code, body.error_message, language, translator),
        )
    if not body.id_token:
        raise HTTPException(status_code=400, detail="idToken is required")

    try:
        user = registry.sign_in(body.id_token)
    except AuthError as e:
        raise HTTPException(status_code=401, detail=describe_auth_error(e.code, e.message, language, translator))
    return {"user": user.model_dump(by_alias=True), "idToken": user.id_token}


@router.post("/auth/sign-out", status_code=204)
def sign_out(
    token: Optional[str] = Depends(bearer_token),
    registry: AuthSessionRegistry = Depends(get_auth_registry),
):
    if token:
        registry.sign_out(token)
    return Response(status_code=204)


@router.get("/auth/me")
def who_am_i(user: Optional[User] = Depends(get_current_user)):
    if user is None:
        raise HTTPException(status_code=401, detail="Not signed in")
    return user.model_dump(by_alias=True)


@router.get("/preferences", response_model=Preferences)
def read_preferences(
    store: PreferenceStore = Depends(get_preference_store),
    user: Optional[User] = Depends(get_current_user),
):
    return store.read(user.uid if user else ANONYMOUS_CLIENT)


@router.put("/preferences", response_model=Preferences)
def update_preferences(
    body: PreferencesUpdate,
    store: PreferenceStore = Depends(get_preference_store),
    user: Optional[User] = Depends(get_current_user),
):
    try:
        return store.update(user.uid if user else ANONYMOUS_CLIENT, body)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/i18n/{language}")
def translations(language: Language, translator: Translator = Depends(translator_dep)):
    return {
        "language": language,
        "direction": text_direction(language),
        "translations": translator.catalog(language),
    }
