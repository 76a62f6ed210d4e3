"""Quiz content and lifeline advice providers.

The Gemini-backed providers call the google-genai SDK from a worker thread so the
event loop stays free while a request is outstanding. Every failure is reported as
``ProviderError``; callers decide whether that is fatal (session setup) or advisory
(lifelines).
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Protocol

from millionaire.backend.config import BackendSettings
from millionaire.backend.content import parse_json_payload
from millionaire.backend.errors import ContentShapeError, ProviderError
from millionaire.backend.models import Question

logger = logging.getLogger(__name__)


class QuizContentProvider(Protocol):
    async def fetch_questions(self, topic: str, count: int) -> Any:
        """Return ``count`` raw question entries for ``topic``."""


class AdviceProvider(Protocol):
    async def audience_poll(self, question: Question) -> dict[str, float]:
        """Return a simulated vote share per option."""

    async def phone_advice(self, question: Question) -> str:
        """Return a conversational hint from a friend."""


@dataclass
class StaticQuizProvider:
    """Serves a fixed question list regardless of topic."""

    questions: list[Any]

    async def fetch_questions(self, topic: str, count: int) -> Any:
        return list(self.questions[:count])


def build_quiz_prompt(topic: str, count: int) -> str:
    return (
        'You generate quizzes for the game "Who Wants to Be a Millionaire?". '
        f'Write {count} questions about "{topic}" in order of increasing difficulty. '
        f"Return only a JSON array of {count} objects, no prose or markdown. "
        'Each object has the shape {"prompt": string, "options": string[], "correct_answer": string}. '
        'The "options" array holds exactly 4 distinct answers and "correct_answer" is one of them.'
    )


def build_audience_prompt(question: Question) -> str:
    return (
        'Simulate an "Ask the Audience" poll for "Who Wants to Be a Millionaire?". '
        f'The question is: "{question.prompt}". The options are: {", ".join(question.options)}. '
        f'The correct answer is "{question.correct_answer}". '
        "Return a JSON object whose keys are the options and whose values are vote percentages. "
        "The correct answer gets the highest share and the values add up to 100. Return only the JSON object."
    )


def build_phone_prompt(question: Question) -> str:
    return (
        'You are the friend on the phone in "Who Wants to Be a Millionaire?". '
        f'The question is: "{question.prompt}". The options are: {", ".join(question.options)}. '
        f'The correct answer is "{question.correct_answer}". '
        "Give a short, chatty hint that leans towards the answer you believe is right, "
        "with a little uncertainty. Never claim to know the answer for sure."
    )


class GeminiTextClient:
    """Thin async wrapper around ``google.genai.Client``."""

    def __init__(self, api_key: str, model: str) -> None:
        self.api_key = api_key
        self.model = model
        self._client: Any = None

    def _ensure_client(self) -> Any:
        if self._client is None:
            if not self.api_key:
                raise ProviderError("Gemini API key is not configured")
            from google import genai

            try:
                self._client = genai.Client(api_key=self.api_key)
            except Exception as exc:
                logger.warning("Gemini client setup failed: %s", exc)
                raise ProviderError(f"Gemini client setup failed: {exc}") from exc
            logger.info("Gemini client connected (model=%s)", self.model)
        return self._client

    async def generate(self, prompt: str, json_response: bool = False) -> str:
        client = self._ensure_client()
        from google.genai import types

        config = types.GenerateContentConfig(response_mime_type="application/json") if json_response else None
        try:
            response = await asyncio.to_thread(
                client.models.generate_content,
                model=self.model,
                contents=prompt,
                config=config,
            )
        except Exception as exc:
            logger.warning("Gemini request failed: %s", exc)
            raise ProviderError(f"Gemini request failed: {exc}") from exc

        text = getattr(response, "text", None)
        if not text:
            raise ProviderError("Gemini returned an empty response")
        return text


class GeminiQuizProvider:
    def __init__(self, client: GeminiTextClient) -> None:
        self.client = client

    async def fetch_questions(self, topic: str, count: int) -> Any:
        text = await self.client.generate(build_quiz_prompt(topic, count), json_response=True)
        return parse_json_payload(text)


class GeminiAdviceProvider:
    def __init__(self, client: GeminiTextClient) -> None:
        self.client = client

    async def audience_poll(self, question: Question) -> dict[str, float]:
        text = await self.client.generate(build_audience_prompt(question), json_response=True)
        try:
            payload = parse_json_payload(text)
        except ContentShapeError as exc:
            raise ProviderError(f"audience poll is not valid JSON: {exc}") from exc
        if not isinstance(payload, dict):
            raise ProviderError("audience poll must be a JSON object")
        try:
            return {str(option): float(share) for option, share in payload.items()}
        except (TypeError, ValueError) as exc:
            raise ProviderError("audience poll values must be numbers") from exc

    async def phone_advice(self, question: Question) -> str:
        return await self.client.generate(build_phone_prompt(question))


def create_providers(
    settings: BackendSettings,
) -> tuple[QuizContentProvider | None, AdviceProvider | None]:
    if not settings.gemini_api_key:
        logger.warning("Gemini API key not set; quiz generation and lifeline advice are disabled")
        return None, None
    client = GeminiTextClient(api_key=settings.gemini_api_key, model=settings.gemini_model)
    return GeminiQuizProvider(client), GeminiAdviceProvider(client)
