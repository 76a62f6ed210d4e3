"""Validation and normalization of externally supplied question sets."""

from __future__ import annotations

import json
import random
import re
from collections.abc import Mapping, Sequence
from typing import Any

from millionaire.backend.errors import ContentShapeError
from millionaire.backend.ladder import DEFAULT_LADDER
from millionaire.backend.models import Question

OPTIONS_PER_QUESTION = 4

_FENCE_RE = re.compile(r"```(\w*)?\s*\n?(.*?)\n?\s*```", re.DOTALL)

# Key spellings accepted from providers; the Italian ones come from Italian-language prompts.
_PROMPT_KEYS = ("prompt", "question", "domanda")
_OPTIONS_KEYS = ("options", "answers", "risposte")
_CORRECT_KEYS = ("correct_answer", "correctAnswer", "risposta_corretta")


def parse_json_payload(text: str) -> Any:
    """Decode a JSON reply, unwrapping a Markdown code fence when present."""
    payload = (text or "").strip()
    if not payload:
        raise ContentShapeError("payload is empty")
    match = _FENCE_RE.search(payload)
    if match and match.group(2):
        payload = match.group(2).strip()
    try:
        return json.loads(payload)
    except json.JSONDecodeError as exc:
        raise ContentShapeError(f"payload is not valid JSON: {exc.msg}") from exc


def validate(
    questions: Any,
    count: int = DEFAULT_LADDER.size,
    rng: random.Random | None = None,
) -> tuple[Question, ...]:
    """Return the normalized question set or raise ``ContentShapeError``.

    When ``rng`` is given, the options of every question are shuffled with it.
    """
    if isinstance(questions, (str, bytes)) or not isinstance(questions, Sequence):
        raise ContentShapeError("question set must be a list")
    if len(questions) != count:
        raise ContentShapeError(f"expected {count} questions, got {len(questions)}")

    normalized = tuple(_normalize_question(entry, position) for position, entry in enumerate(questions))
    if rng is None:
        return normalized
    return tuple(_shuffled(question, rng) for question in normalized)


def _normalize_question(entry: Any, position: int) -> Question:
    if isinstance(entry, Question):
        prompt, options, correct = entry.prompt, entry.options, entry.correct_answer
    elif isinstance(entry, Mapping):
        prompt = _first_present(entry, _PROMPT_KEYS)
        options = _first_present(entry, _OPTIONS_KEYS)
        correct = _first_present(entry, _CORRECT_KEYS)
    else:
        raise ContentShapeError(f"question {position} is not an object")

    if not isinstance(prompt, str) or prompt.strip() == "":
        raise ContentShapeError(f"question {position} has no prompt")
    if isinstance(options, (str, bytes)) or not isinstance(options, Sequence):
        raise ContentShapeError(f"question {position} options must be a list")
    if len(options) != OPTIONS_PER_QUESTION:
        raise ContentShapeError(f"question {position} must have {OPTIONS_PER_QUESTION} options")
    if not all(isinstance(option, str) and option.strip() for option in options):
        raise ContentShapeError(f"question {position} has an empty option")

    cleaned_options = tuple(option.strip() for option in options)
    if len(set(cleaned_options)) != len(cleaned_options):
        raise ContentShapeError(f"question {position} has duplicate options")
    if not isinstance(correct, str) or correct.strip() not in cleaned_options:
        raise ContentShapeError(f"question {position} correct answer is not one of its options")

    return Question(prompt=prompt.strip(), options=cleaned_options, correct_answer=correct.strip())


def _first_present(entry: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in entry:
            return entry[key]
    return None


def _shuffled(question: Question, rng: random.Random) -> Question:
    options = list(question.options)
    rng.shuffle(options)
    return Question(prompt=question.prompt, options=tuple(options), correct_answer=question.correct_answer)
