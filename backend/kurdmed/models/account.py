# backend/kurdmed/models/account.py

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Theme = Literal["light", "dark"]


class User(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = Field(None, alias="displayName")
    id_token: Optional[str] = Field(None, alias="idToken", exclude=True)


class SignInRequest(BaseModel):
    """Credential obtained by the browser from the Google sign-in popup."""

    model_config = ConfigDict(populate_by_name=True)

    id_token: Optional[str] = Field(None, alias="idToken")
    error_code: Optional[str] = Field(None, alias="errorCode")
    error_message: Optional[str] = Field(None, alias="errorMessage")


class Preferences(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    theme: Theme = "light"
    language: Literal["en", "ku"] = "en"
    onboarding_complete: bool = Field(False, alias="onboardingComplete")


class PreferencesUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    theme: Optional[Theme] = None
    language: Optional[Literal["en", "ku"]] = None
    onboarding_complete: Optional[bool] = Field(None, alias="onboardingComplete")
