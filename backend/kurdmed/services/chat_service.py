# backend/kurdmed/services/chat_service.py

import logging
import threading
from collections import OrderedDict
from typing import Iterable, Iterator, List, Optional
from uuid import uuid4

from kurdmed.models import ConversationTurn
from kurdmed.services.i18n import Translator, get_translator
from kurdmed.services.medication_service import ChatSessionManager, MedicationService

logger = logging.getLogger(__name__)


def accumulate_fragments(fragments: Iterable[str]) -> Iterator[str]:
    """Running concatenation of a fragment stream, one value per fragment."""
    text = ""
    for fragment in fragments:
        text += fragment
        yield text


class ChatConversation:
    """The visible chat log plus the model session behind it."""

    def __init__(self, sessions: ChatSessionManager, translator: Optional[Translator] = None):
        self.sessions = sessions
        self.translator = translator or get_translator()
        self.turns: List[ConversationTurn] = []

    @property
    def language(self) -> Optional[str]:
        return self.sessions.language

    def reset(self, language: str) -> ConversationTurn:
        self.sessions.start(language)
        greeting = ConversationTurn(
            sender="model",
            text=self.translator.translate("aiChatbot.initialMessage", language),
        )
        self.turns = [greeting]
        return greeting

    def send(self, message: str, language: str) -> Iterator[str]:
        """Stream the reply to ``message``, yielding the accumulated text.

        A failure at any point replaces the unfinished reply with the
        localized error message, which is then yielded as the final value.
        """
        if not message or not message.strip():
            raise ValueError("message must not be empty")

        self.turns.append(ConversationTurn(sender="user", text=message))
        return self._reply(message, language)

    def _reply(self, message: str, language: str) -> Iterator[str]:
        reply = ConversationTurn(sender="model", text="")
        self.turns.append(reply)
        try:
            for text in accumulate_fragments(self.sessions.send(message, language)):
                reply.text = text
                yield text
        except Exception:
            logger.exception("Error sending chat message")
            if self.turns and self.turns[-1] is reply and reply.text == "":
                self.turns.pop()
            error_text = self.translator.translate("aiChatbot.errorMessage", language)
            self.turns.append(ConversationTurn(sender="model", text=error_text))
            yield error_text


class ConversationStore:
    """In-memory conversations keyed by the id handed to the browser.

    Holds at most ``max_conversations``; the least recently used one is
    dropped when a new conversation would go over the limit.
    """

    def __init__(self, service: MedicationService, translator: Optional[Translator] = None, max_conversations: int = 500):
        self.service = service
        self.translator = translator
        self.max_conversations = max_conversations
        self._conversations: "OrderedDict[str, ChatConversation]" = OrderedDict()
        self._lock = threading.Lock()

    def create(self, language: str) -> str:
        session_id = str(uuid4())
        conversation = ChatConversation(self.service.chat_session_manager(), self.translator)
        conversation.reset(language)
        with self._lock:
            self._conversations[session_id] = conversation
            while len(self._conversations) > self.max_conversations:
                evicted, _ = self._conversations.popitem(last=False)
                logger.info("Dropped chat session %s", evicted)
        return session_id

    def get(self, session_id: str) -> Optional[ChatConversation]:
        with self._lock:
            conversation = self._conversations.get(session_id)
            if conversation is not None:
                self._conversations.move_to_end(session_id)
            return conversation

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._conversations

    def __len__(self) -> int:
        return len(self._conversations)
