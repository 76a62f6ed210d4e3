import random

import pytest

from millionaire.backend.content import parse_json_payload, validate
from millionaire.backend.errors import ContentShapeError
from millionaire.backend.models import Question


def _raw_questions(count: int = 15) -> list[dict]:
    return [
        {
            "prompt": f"Question {index}?",
            "options": [f"right {index}", f"wrong {index}a", f"wrong {index}b", f"wrong {index}c"],
            "correct_answer": f"right {index}",
        }
        for index in range(count)
    ]


def test_validate_normalizes_mappings_into_questions() -> None:
    questions = validate(_raw_questions())

    assert len(questions) == 15
    assert isinstance(questions[0], Question)
    assert questions[3].correct_answer == "right 3"
    assert questions[3].options[0] == "right 3"


def test_validate_accepts_italian_keys_and_strips_whitespace() -> None:
    raw = [
        {
            "domanda": "  Capitale d'Italia?  ",
            "risposte": [" Roma", "Milano", "Napoli", "Torino "],
            "risposta_corretta": "Roma ",
        }
    ]

    questions = validate(raw, count=1)

    assert questions[0].prompt == "Capitale d'Italia?"
    assert questions[0].options == ("Roma", "Milano", "Napoli", "Torino")
    assert questions[0].correct_answer == "Roma"


def test_validate_rejects_wrong_question_count() -> None:
    with pytest.raises(ContentShapeError):
        validate(_raw_questions(14))
    with pytest.raises(ContentShapeError):
        validate(_raw_questions(16))


def test_validate_rejects_non_list_payloads() -> None:
    with pytest.raises(ContentShapeError):
        validate({"questions": _raw_questions()})
    with pytest.raises(ContentShapeError):
        validate("not a list", count=10)


@pytest.mark.parametrize(
    "mutation",
    [
        lambda entry: entry.update(correct_answer="not an option"),
        lambda entry: entry.update(options=entry["options"][:3]),
        lambda entry: entry.update(options=["same", "same", "other", "another"], correct_answer="same"),
        lambda entry: entry.update(prompt=""),
        lambda entry: entry.update(options="a, b, c, d"),
        lambda entry: entry.update(options=["a", "", "c", "d"], correct_answer="a"),
    ],
)
def test_validate_rejects_broken_question(mutation) -> None:
    raw = _raw_questions()
    mutation(raw[7])

    with pytest.raises(ContentShapeError):
        validate(raw)


def test_validate_shuffles_options_with_injected_rng() -> None:
    first = validate(_raw_questions(), rng=random.Random(3))
    second = validate(_raw_questions(), rng=random.Random(3))

    assert first == second
    assert any(question.options[0] != question.correct_answer for question in first)
    for shuffled, original in zip(first, validate(_raw_questions())):
        assert shuffled.correct_answer == original.correct_answer
        assert set(shuffled.options) == set(original.options)


def test_parse_json_payload_unwraps_markdown_fence() -> None:
    text = '```json\n[{"prompt": "Q", "options": ["a", "b", "c", "d"], "correct_answer": "a"}]\n```'

    payload = parse_json_payload(text)

    assert payload[0]["correct_answer"] == "a"


def test_parse_json_payload_rejects_garbage() -> None:
    with pytest.raises(ContentShapeError):
        parse_json_payload("here are your questions!")
    with pytest.raises(ContentShapeError):
        parse_json_payload("   ")
