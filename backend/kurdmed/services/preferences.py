# backend/kurdmed/services/preferences.py

import json
import logging
import threading
from pathlib import Path
from typing import Dict, Optional

from kurdmed.models import Preferences, PreferencesUpdate

logger = logging.getLogger(__name__)

THEME_SLOT = "theme"
LANGUAGE_SLOT = "language"
ONBOARDING_SLOT = "kurdMedOnboardingComplete"

_VALID_VALUES = {
    THEME_SLOT: {"light", "dark"},
    LANGUAGE_SLOT: {"en", "ku"},
    ONBOARDING_SLOT: {"true"},
}


class PreferenceStore:
    """String slots per client, persisted to a JSON file.

    The file is read on first access and rewritten on every change.
    """

    def __init__(self, path: str, default_language: str = "en"):
        self.path = Path(path)
        self.default_language = default_language
        self._data: Optional[Dict[str, Dict[str, str]]] = None
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, Dict[str, str]]:
        if self._data is None:
            try:
                with self.path.open(encoding="utf-8") as fh:
                    self._data = json.load(fh)
            except FileNotFoundError:
                self._data = {}
            except (OSError, json.JSONDecodeError):
                logger.exception("Could not read preferences from %s; starting empty", self.path)
                self._data = {}
        return self._data

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as fh:
            json.dump(self._data, fh, ensure_ascii=False, indent=2)
        tmp.replace(self.path)

    def get_item(self, client_id: str, slot: str) -> Optional[str]:
        with self._lock:
            return self._load().get(client_id, {}).get(slot)

    def set_item(self, client_id: str, slot: str, value: str) -> None:
        allowed = _VALID_VALUES.get(slot)
        if allowed is None:
            raise ValueError(f"unknown preference slot: {slot}")
        if value not in allowed:
            raise ValueError(f"invalid value for {slot}: {value!r}")
        with self._lock:
            self._load().setdefault(client_id, {})[slot] = value
            self._save()

    def read(self, client_id: str) -> Preferences:
        return Preferences(
            theme=self.get_item(client_id, THEME_SLOT) or "light",
            language=self.get_item(client_id, LANGUAGE_SLOT) or self.default_language,
            onboardingComplete=self.get_item(client_id, ONBOARDING_SLOT) == "true",
        )

    def update(self, client_id: str, changes: PreferencesUpdate) -> Preferences:
        if changes.theme is not None:
            self.set_item(client_id, THEME_SLOT, changes.theme)
        if changes.language is not None:
            self.set_item(client_id, LANGUAGE_SLOT, changes.language)
        if changes.onboarding_complete:
            self.set_item(client_id, ONBOARDING_SLOT, "true")
        return self.read(client_id)
