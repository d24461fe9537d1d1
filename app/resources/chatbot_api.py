"""REST call for the gaming assistant."""
import logging
from typing import Dict

from api_client import TrackerAPIError

logger = logging.getLogger('tracker.chatbot')


class ChatbotAPI:
    """Sends one free-text question per call.

    No conversation history is sent: every call stands alone, so an earlier
    question never influences a later answer.
    """

    def __init__(self, client) -> None:
        self._client = client

    def ask(self, question: str, **kwargs) -> Dict:
        """``POST /chatbot {question}`` → ``{'answer': ...}``.

        Raises:
            TrackerAPIError: Logged here, then re-raised for the caller.
        """
        try:
            return self._client.post('/chatbot', {'question': question}, **kwargs)
        except TrackerAPIError as exc:
            logger.error("Chatbot request failed: %s", exc)
            raise
