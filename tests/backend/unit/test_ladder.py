import pytest

from millionaire.backend.errors import OutOfRangeError
from millionaire.backend.ladder import DEFAULT_LADDER, PrizeLadder, is_safe_haven, prize_at, safe_haven_floor


def test_default_ladder_has_fifteen_increasing_tiers() -> None:
    assert DEFAULT_LADDER.size == 15
    assert DEFAULT_LADDER.tiers[0] == 100
    assert DEFAULT_LADDER.tiers[-1] == 1_000_000
    assert list(DEFAULT_LADDER.tiers) == sorted(set(DEFAULT_LADDER.tiers))


def test_prize_at_rejects_indices_outside_the_ladder() -> None:
    assert prize_at(0) == 100
    assert prize_at(14) == 1_000_000

    with pytest.raises(OutOfRangeError):
        prize_at(-1)
    with pytest.raises(OutOfRangeError):
        prize_at(15)


def test_safe_havens_are_the_1000_and_32000_tiers() -> None:
    havens = [index for index in range(DEFAULT_LADDER.size) if is_safe_haven(index)]

    assert havens == [4, 9]
    assert [prize_at(index) for index in havens] == [1000, 32000]


def test_safe_haven_floor_starts_at_zero_and_never_decreases() -> None:
    floors = [safe_haven_floor(index) for index in range(DEFAULT_LADDER.size)]

    assert floors[0] == 0
    assert floors == sorted(floors)
    assert floors[:6] == [0, 0, 0, 0, 0, 1000]
    assert floors[10] == 32000
    assert floors[14] == 32000


def test_safe_haven_floor_never_exceeds_previous_tier() -> None:
    for index in range(1, DEFAULT_LADDER.size):
        assert safe_haven_floor(index) <= prize_at(index - 1)


def test_safe_haven_floor_requires_passing_the_haven() -> None:
    # Missing the 1000 question itself does not secure it.
    assert safe_haven_floor(4) == 0
    assert safe_haven_floor(5) == 1000


def test_secured_prize_is_previous_tier() -> None:
    assert DEFAULT_LADDER.secured_prize(0) == 0
    assert DEFAULT_LADDER.secured_prize(1) == 100
    assert DEFAULT_LADDER.secured_prize(7) == 4000


def test_custom_ladder_floor_uses_its_own_havens() -> None:
    ladder = PrizeLadder(tiers=(10, 20, 30, 40), safe_havens=(1,))

    assert [ladder.safe_haven_floor(index) for index in range(4)] == [0, 0, 20, 20]


@pytest.mark.parametrize(
    ("tiers", "havens"),
    [
        ((), ()),
        ((10, 10, 20), ()),
        ((10, 20, 30), (2, 1)),
        ((10, 20, 30), (3,)),
    ],
)
def test_invalid_ladders_are_rejected(tiers, havens) -> None:
    with pytest.raises(ValueError):
        PrizeLadder(tiers=tiers, safe_havens=havens)
