"""Conversation with the gaming assistant.

Messages live only as long as the view does.  Each question is sent on
its own; the transcript is never sent back to the service.
"""
import datetime
import logging
from typing import Dict, List, Optional

from api_client import TrackerAPIError, TrackerAuthError
from ..resources.chatbot_api import ChatbotAPI

GREETING = ("Hello! I'm your gaming assistant. Ask me anything about games, "
            "strategies, or tips!")
NO_ANSWER = ("I'm not sure how to respond to that. Could you try asking "
             "something else?")
CONNECTION_ERROR = ("Sorry, I'm having trouble connecting to the server. "
                    "Please try again later.")


def _message(text: str, sender: str, is_error: bool = False) -> Dict:
    return {
        'text': text,
        'sender': sender,
        'timestamp': datetime.datetime.now(),
        'is_error': is_error,
    }


class ChatView:
    """Transcript of question/answer pairs."""

    def __init__(self, session) -> None:
        self._session = session
        self._log = logging.getLogger('tracker.views.chat')
        self.messages: List[Dict] = [_message(GREETING, 'bot')]
        self.loading = False

    def send(self, text: str) -> Optional[Dict]:
        """Ask *text* and append both sides of the exchange.

        Blank input, or input while a question is still pending, is ignored.

        Returns:
            The bot's reply message, or ``None`` when nothing was sent.
        """
        question = (text or '').strip()
        if not question or self.loading:
            return None

        self.messages.append(_message(question, 'user'))
        self.loading = True
        try:
            data = ChatbotAPI(self._session.client).ask(question)
            reply = _message(self._answer_text(data), 'bot')
        except TrackerAPIError as exc:
            self._log.error("Chatbot error: %s", exc)
            reply = _message(CONNECTION_ERROR, 'bot', is_error=True)
            if isinstance(exc, TrackerAuthError):
                self._session.handle_auth_failure()
        finally:
            self.loading = False
        self.messages.append(reply)
        return reply

    @staticmethod
    def _answer_text(data) -> str:
        if isinstance(data, dict):
            for key in ('answer', 'tip'):
                value = data.get(key)
                if isinstance(value, str) and value.strip():
                    return value
        return NO_ANSWER
