# backend/kurdmed/services/i18n.py

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from kurdmed.models import SUPPORTED_LANGUAGES

logger = logging.getLogger(__name__)

LOCALES_DIR = Path(__file__).resolve().parents[1] / "locales"
RTL_LANGUAGES = {"ku"}


def flatten(tree: Mapping[str, Any], prefix: str = "") -> Dict[str, str]:
    """Turn ``{"a": {"b": "x"}}`` into ``{"a.b": "x"}``."""
    flat: Dict[str, str] = {}
    for key, value in tree.items():
        full_key = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            flat.update(flatten(value, full_key))
        else:
            flat[full_key] = str(value)
    return flat


class Translator:
    """Flat key -> string lookup for every supported language."""

    def __init__(self, catalogs: Optional[Dict[str, Dict[str, str]]] = None):
        self._catalogs = catalogs or {}

    @classmethod
    def from_directory(cls, directory: Path = LOCALES_DIR) -> "Translator":
        catalogs: Dict[str, Dict[str, str]] = {}
        for language in SUPPORTED_LANGUAGES:
            path = directory / f"{language}.json"
            try:
                with path.open(encoding="utf-8") as fh:
                    catalogs[language] = flatten(json.load(fh))
            except (OSError, json.JSONDecodeError):
                logger.exception("Failed to load translations from %s", path)
                catalogs[language] = {}
        return cls(catalogs)

    def catalog(self, language: str) -> Dict[str, str]:
        return dict(self._catalogs.get(language, {}))

    def translate(self, key: str, language: str, replacements: Optional[Mapping[str, str]] = None) -> str:
        value = self._catalogs.get(language, {}).get(key)
        if value is None:
            logger.warning("Translation key not found: %s (%s)", key, language)
            return key

        for placeholder, replacement in (replacements or {}).items():
            value = value.replace("{" + placeholder + "}", str(replacement))
        return value or key

    t = translate


def text_direction(language: str) -> str:
    return "rtl" if language in RTL_LANGUAGES else "ltr"


@lru_cache(maxsize=1)
def get_translator() -> Translator:
    return Translator.from_directory()
