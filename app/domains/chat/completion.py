"""Completion requester backed by Google Gemini."""

import asyncio
import logging
from typing import Any

import google.generativeai as genai
from google.generativeai.types import HarmBlockThreshold, HarmCategory

from app.core.config import FALLBACK_REPLY, SYSTEM_PROMPT, Settings
from app.exceptions.completion import (
    CompletionConfigurationError,
    CompletionError,
    CompletionTimeoutError,
)
from app.schemas.chat import ChatTurn, MessageRole

logger = logging.getLogger(__name__)

# Gemini names the assistant side of a conversation "model"
GEMINI_ROLES = {
    MessageRole.USER: "user",
    MessageRole.ASSISTANT: "model",
}


def build_completion_messages(history: list[ChatTurn]) -> list[ChatTurn]:
    """Prepend the fixed system instruction to the conversation history."""
    return [ChatTurn(role=MessageRole.SYSTEM, content=SYSTEM_PROMPT), *history]


def to_gemini_contents(messages: list[ChatTurn]) -> list[dict]:
    """Convert chat turns to Gemini contents, leaving out system turns.

    Gemini expects the conversation to open with a user turn and to alternate
    between user and model. Model turns before the first user turn are
    dropped, and consecutive turns of one role (for instance a user message
    whose reply was never stored) are merged into a single multi-part turn.
    """
    contents: list[dict] = []
    for message in messages:
        if message.role == MessageRole.SYSTEM:
            continue
        role = GEMINI_ROLES[message.role]
        if not contents and role != "user":
            continue
        if contents and contents[-1]["role"] == role:
            contents[-1]["parts"].append(message.content)
        else:
            contents.append({"role": role, "parts": [message.content]})
    return contents


def extract_reply(response: Any) -> str:
    """Text of the first candidate, or the fallback reply when there is none."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return FALLBACK_REPLY

    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    text = "".join(getattr(part, "text", "") or "" for part in parts).strip()
    return text or FALLBACK_REPLY


class GeminiCompletionClient:
    """Service class for chat completions using Google Gemini."""

    def __init__(self, config: Settings):
        """Initialize completion client with explicit settings.

        The model is created on first use, so a missing API key only fails
        requests that actually need a completion.

        Args:
            config: Application settings holding the Gemini credentials.
        """
        self.config = config
        self.model = None

    def _get_model(self, system_instruction: str):
        if not self.config.gemini_api_key:
            raise CompletionConfigurationError("Gemini API key not configured")

        if self.model is None:
            genai.configure(api_key=self.config.gemini_api_key)
            self.model = genai.GenerativeModel(
                model_name=self.config.gemini_model,
                system_instruction=system_instruction,
                safety_settings={
                    HarmCategory.HARM_CATEGORY_HARASSMENT: (HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE),
                    HarmCategory.HARM_CATEGORY_HATE_SPEECH: (HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE),
                    HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT: (HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE),
                    HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT: (HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE),
                },
                generation_config=genai.types.GenerationConfig(
                    candidate_count=1,
                    max_output_tokens=self.config.gemini_max_tokens,
                    temperature=self.config.gemini_temperature,
                ),
            )
            logger.info(f"Gemini completion client initialized with model: {self.config.gemini_model}")
        return self.model

    async def complete(self, history: list[ChatTurn]) -> str:
        """Generate the assistant reply for an ordered history.

        Args:
            history: Conversation turns, oldest first

        Returns:
            Reply text, or the fallback reply when the model returned no text

        Raises:
            CompletionError: If the upstream call fails; never retried
        """
        messages = build_completion_messages(history)
        system_instruction = "\n\n".join(
            message.content for message in messages if message.role == MessageRole.SYSTEM
        )
        model = self._get_model(system_instruction)

        try:
            response = await asyncio.wait_for(
                model.generate_content_async(to_gemini_contents(messages)),
                timeout=self.config.ai_request_timeout,
            )
        except TimeoutError:
            logger.error(f"Gemini request timed out after {self.config.ai_request_timeout}s")
            raise CompletionTimeoutError("Completion request timed out") from None
        except Exception as e:
            logger.error(f"Gemini API call failed: {str(e)}")
            raise CompletionError(f"Completion request failed: {str(e)}") from e

        return extract_reply(response)
