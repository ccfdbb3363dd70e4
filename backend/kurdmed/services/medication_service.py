# backend/kurdmed/services/medication_service.py

import logging
import threading
from functools import lru_cache
from typing import Any, Callable, Dict, Iterator, List, Optional

from openai import AzureOpenAI

from kurdmed.core.config import settings
from kurdmed.models import MedicationRecord, MedicationStatus
from kurdmed.services.image_encoder import to_data_url
from kurdmed.services.prompt_builder import (
    build_chat_instruction,
    build_identification_instruction,
    build_name_prompt,
    response_format,
)
from kurdmed.services.response_parser import parse_medication_response

logger = logging.getLogger(__name__)

COMMUNICATION_ERROR_TEXT = "An error occurred while communicating with the AI. Please try again."


def _get_azure_client() -> AzureOpenAI:
    options: Dict[str, Any] = {}
    if settings.OPENAI_TIMEOUT:
        options["timeout"] = settings.OPENAI_TIMEOUT
    return AzureOpenAI(
        api_version=settings.AZURE_OPENAI_API_VERSION,
        azure_endpoint=settings.AZURE_OPENAI_ENDPOINT,
        api_key=settings.AZURE_OPENAI_API_KEY,
        **options,
    )


@lru_cache(maxsize=1)
def get_client() -> AzureOpenAI:
    return _get_azure_client()


def communication_error_record() -> MedicationRecord:
    return MedicationRecord(rawText=COMMUNICATION_ERROR_TEXT, status=MedicationStatus.ERROR)


class ChatSession:
    """A multi-turn conversation with the model, pinned to one language."""

    def __init__(self, client_factory: Callable[[], Any], model: str, language: str):
        self._client_factory = client_factory
        self.model = model
        self.language = language
        self.instruction = build_chat_instruction(language)
        self.history: List[Dict[str, str]] = []

    def stream(self, message: str) -> Iterator[str]:
        """Yield reply fragments in the order they arrive.

        The exchange is recorded in ``history`` only once the stream has ended.
        """
        messages = [{"role": "system", "content": self.instruction}]
        messages.extend(self.history)
        messages.append({"role": "user", "content": message})

        response = self._client_factory().chat.completions.create(
            model=self.model,
            messages=messages,
            stream=True,
        )

        reply: List[str] = []
        for chunk in response:
            # Azure sends content-filter chunks without choices.
            if not chunk.choices:
                continue
            fragment = chunk.choices[0].delta.content
            if fragment:
                reply.append(fragment)
                yield fragment

        self.history.append({"role": "user", "content": message})
        self.history.append({"role": "assistant", "content": "".join(reply)})


class ChatSessionManager:
    """Holds the single active chat session of one conversation.

    Sending in a different language replaces the session; earlier turns are
    not replayed to the new one.
    """

    def __init__(self, session_factory: Callable[[str], ChatSession]):
        self._session_factory = session_factory
        self._session: Optional[ChatSession] = None
        self._lock = threading.Lock()

    @property
    def session(self) -> Optional[ChatSession]:
        return self._session

    @property
    def language(self) -> Optional[str]:
        return self._session.language if self._session else None

    def start(self, language: str) -> ChatSession:
        with self._lock:
            self._session = self._session_factory(language)
            return self._session

    def _session_for(self, language: str) -> ChatSession:
        with self._lock:
            if self._session is None or self._session.language != language:
                logger.info("Starting chat session (language=%s)", language)
                self._session = self._session_factory(language)
            return self._session

    def send(self, message: str, language: str) -> Iterator[str]:
        return self._session_for(language).stream(message)


class MedicationService:
    """One-shot identification requests and chat sessions against the model."""

    def __init__(self, client: Any = None, model: Optional[str] = None):
        self._client = client
        self.model = model or settings.AZURE_CHAT_DEPLOYMENT

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = get_client()
        return self._client

    def _identify(self, content: Any, language: str) -> MedicationRecord:
        completion = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": build_identification_instruction(language)},
                {"role": "user", "content": content},
            ],
            response_format=response_format(),
        )
        return parse_medication_response(completion.choices[0].message.content)

    def identify_with_image(self, image_bytes: bytes, mime_type: str, prompt: str, language: str) -> MedicationRecord:
        try:
            content = [
                {"type": "image_url", "image_url": {"url": to_data_url(image_bytes, mime_type)}},
                {"type": "text", "text": prompt},
            ]
            return self._identify(content, language)
        except Exception:
            logger.exception("Error identifying with image")
            return communication_error_record()

    def identify_with_name(self, name: str, prompt: Optional[str], language: str) -> MedicationRecord:
        try:
            return self._identify(prompt or build_name_prompt(name, language), language)
        except Exception:
            logger.exception("Error identifying with name")
            return communication_error_record()

    def new_chat_session(self, language: str) -> ChatSession:
        return ChatSession(lambda: self.client, self.model, language)

    def chat_session_manager(self) -> ChatSessionManager:
        return ChatSessionManager(self.new_chat_session)
