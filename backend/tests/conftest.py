from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from kurdmed.api import deps
from kurdmed.main import app
from kurdmed.services.auth import AuthError, AuthSessionRegistry
from kurdmed.services.chat_service import ConversationStore
from kurdmed.services.i18n import Translator
from kurdmed.services.medication_service import MedicationService
from kurdmed.services.preferences import PreferenceStore
from kurdmed.models import User


def completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def chunk(content):
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=content))])


class FakeCompletions:
    """Stands in for ``client.chat.completions``."""

    def __init__(self, reply="{}", fragments=(), error=None, fail_after=None):
        self.reply = reply
        self.fragments = list(fragments)
        self.error = error
        self.fail_after = fail_after
        self.calls = []

    def _stream(self):
        for index, fragment in enumerate(self.fragments):
            if self.fail_after is not None and index == self.fail_after:
                raise RuntimeError("stream dropped")
            yield chunk(fragment)
        if self.fail_after is not None and self.fail_after >= len(self.fragments):
            raise RuntimeError("stream dropped")

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        if kwargs.get("stream"):
            return self._stream()
        return completion(self.reply)


class FakeClient:
    def __init__(self, **kwargs):
        self.chat = SimpleNamespace(completions=FakeCompletions(**kwargs))

    @property
    def calls(self):
        return self.chat.completions.calls


class FakeProvider:
    def __init__(self):
        self.users = {}

    def sign_in_with_id_token(self, google_id_token):
        if google_id_token == "bad":
            raise AuthError("auth/invalid-credential", "INVALID_IDP_RESPONSE")
        user = User(uid="u-1", email="rebin@example.com", displayName="Rebin", idToken="firebase-token")
        self.users["firebase-token"] = user
        return user

    def lookup(self, id_token):
        return self.users.get(id_token)


@pytest.fixture
def translator():
    return Translator.from_directory()


@pytest.fixture
def fake_client():
    return FakeClient(
        reply='{"name": "Paracetamol", "uses": ["pain"], "sideEffects": [], "disclaimer": "x"}',
        fragments=["Hel", "lo"],
    )


@pytest.fixture
def service(fake_client):
    return MedicationService(client=fake_client, model="test-model")


@pytest.fixture
def api(service, translator, tmp_path):
    conversations = ConversationStore(service, translator)
    preferences = PreferenceStore(str(tmp_path / "preferences.json"))
    registry = AuthSessionRegistry(FakeProvider())

    app.dependency_overrides[deps.get_medication_service] = lambda: service
    app.dependency_overrides[deps.get_conversations] = lambda: conversations
    app.dependency_overrides[deps.get_preference_store] = lambda: preferences
    app.dependency_overrides[deps.get_auth_registry] = lambda: registry
    app.dependency_overrides[deps.translator_dep] = lambda: translator
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
