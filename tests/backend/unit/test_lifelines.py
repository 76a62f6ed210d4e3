import asyncio
import random

import pytest

from millionaire.backend.errors import AlreadyUsedError, ProviderError
from millionaire.backend.lifelines import (
    ADVICE_FAILED_MESSAGE,
    ADVICE_UNAVAILABLE_MESSAGE,
    audience_is_valid,
    fifty_fifty,
    use_lifeline,
)
from millionaire.backend.models import LifelineKind, Lifelines, Question

QUESTION = Question(
    prompt="Which planet is known as the red planet?",
    options=("Venus", "Mars", "Jupiter", "Saturn"),
    correct_answer="Mars",
)


class _Advice:
    def __init__(self, poll=None, text="I'd go with Mars, I think.", error: Exception | None = None) -> None:
        self.poll = poll if poll is not None else {"Venus": 10, "Mars": 70, "Jupiter": 15, "Saturn": 5}
        self.text = text
        self.error = error
        self.calls: list[str] = []

    async def audience_poll(self, question):
        self.calls.append("audience")
        if self.error is not None:
            raise self.error
        return self.poll

    async def phone_advice(self, question):
        self.calls.append("phone")
        if self.error is not None:
            raise self.error
        return self.text


class _SlowAdvice(_Advice):
    async def phone_advice(self, question):
        await asyncio.sleep(1)
        return self.text


@pytest.mark.parametrize("seed", range(50))
def test_fifty_fifty_never_removes_correct_answer(seed: int) -> None:
    eliminated = fifty_fifty(QUESTION, random.Random(seed))

    assert len(eliminated) == 2
    assert QUESTION.correct_answer not in eliminated
    assert set(eliminated) <= set(QUESTION.options)


def test_fifty_fifty_is_deterministic_for_a_seed() -> None:
    assert fifty_fifty(QUESTION, random.Random(42)) == fifty_fifty(QUESTION, random.Random(42))


def test_use_fifty_fifty_consumes_flag_without_provider() -> None:
    lifelines = Lifelines()

    result = asyncio.run(use_lifeline(LifelineKind.FIFTY_FIFTY, QUESTION, lifelines, rng=random.Random(1)))

    assert lifelines.fifty_fifty is False
    assert lifelines.ask_audience is True
    assert result.error is None
    assert len(result.eliminated) == 2


def test_second_use_raises_already_used_and_keeps_flags() -> None:
    lifelines = Lifelines()
    asyncio.run(use_lifeline("phone_friend", QUESTION, lifelines, advice=_Advice()))
    before = lifelines.to_dict()

    with pytest.raises(AlreadyUsedError):
        asyncio.run(use_lifeline("phone_friend", QUESTION, lifelines, advice=_Advice()))

    assert lifelines.to_dict() == before


def test_ask_audience_returns_valid_poll() -> None:
    lifelines = Lifelines()

    result = asyncio.run(use_lifeline(LifelineKind.ASK_AUDIENCE, QUESTION, lifelines, advice=_Advice()))

    assert result.audience == {"Venus": 10, "Mars": 70, "Jupiter": 15, "Saturn": 5}
    assert result.audience_valid is True
    assert lifelines.ask_audience is False


def test_ask_audience_keeps_inconsistent_poll_as_advisory() -> None:
    poll = {"Venus": 60, "Mars": 20, "Jupiter": 15, "Saturn": 5}

    result = asyncio.run(use_lifeline(LifelineKind.ASK_AUDIENCE, QUESTION, Lifelines(), advice=_Advice(poll=poll)))

    assert result.audience == poll
    assert result.audience_valid is False
    assert result.error is None


def test_phone_friend_delivers_text_as_is() -> None:
    result = asyncio.run(use_lifeline(LifelineKind.PHONE_FRIEND, QUESTION, Lifelines(), advice=_Advice(text="No idea!")))

    assert result.advice == "No idea!"


def test_missing_provider_consumes_lifeline_with_advisory() -> None:
    lifelines = Lifelines()

    result = asyncio.run(use_lifeline(LifelineKind.ASK_AUDIENCE, QUESTION, lifelines, advice=None))

    assert result.error == ADVICE_UNAVAILABLE_MESSAGE
    assert lifelines.ask_audience is False


def test_provider_failure_consumes_lifeline_with_advisory() -> None:
    lifelines = Lifelines()
    advice = _Advice(error=ProviderError("quota exceeded"))

    result = asyncio.run(use_lifeline(LifelineKind.PHONE_FRIEND, QUESTION, lifelines, advice=advice))

    assert result.error == ADVICE_FAILED_MESSAGE
    assert lifelines.phone_friend is False
    assert advice.calls == ["phone"]


def test_provider_timeout_consumes_lifeline_with_advisory() -> None:
    lifelines = Lifelines()

    result = asyncio.run(
        use_lifeline(LifelineKind.PHONE_FRIEND, QUESTION, lifelines, advice=_SlowAdvice(), timeout=0.01)
    )

    assert result.error == ADVICE_FAILED_MESSAGE
    assert lifelines.phone_friend is False


def test_unexpected_provider_error_consumes_lifeline_with_advisory() -> None:
    lifelines = Lifelines()
    advice = _Advice(error=ConnectionError("network down"))

    result = asyncio.run(use_lifeline(LifelineKind.ASK_AUDIENCE, QUESTION, lifelines, advice=advice))

    assert result.error == ADVICE_FAILED_MESSAGE
    assert result.audience is None
    assert lifelines.ask_audience is False
    assert advice.calls == ["audience"]


@pytest.mark.parametrize(
    "poll",
    [
        {"Venus": 10, "Mars": 70, "Jupiter": 15},
        {"Venus": 10, "Mars": 60, "Jupiter": 15, "Saturn": 5},
        {"Venus": 35, "Mars": 35, "Jupiter": 20, "Saturn": 10},
        {"Venus": 10, "Mars": "lots", "Jupiter": 15, "Saturn": 5},
        ["Mars", 100],
    ],
)
def test_audience_is_valid_rejects_broken_polls(poll) -> None:
    assert audience_is_valid(poll, QUESTION) is False


def test_audience_is_valid_accepts_float_shares() -> None:
    assert audience_is_valid({"Venus": 12.5, "Mars": 62.5, "Jupiter": 15.0, "Saturn": 10.0}, QUESTION) is True
