"""Prize ladder table and safe-haven lookups."""

from __future__ import annotations

from dataclasses import dataclass

from millionaire.backend.errors import OutOfRangeError


@dataclass(frozen=True)
class PrizeLadder:
    tiers: tuple[int, ...]
    safe_havens: tuple[int, ...]

    def __post_init__(self) -> None:
        if not self.tiers:
            raise ValueError("ladder needs at least one tier")
        if any(low >= high for low, high in zip(self.tiers, self.tiers[1:])):
            raise ValueError("ladder tiers must be strictly increasing")
        if list(self.safe_havens) != sorted(set(self.safe_havens)):
            raise ValueError("safe haven indices must be unique and increasing")
        if any(index < 0 or index >= len(self.tiers) for index in self.safe_havens):
            raise ValueError("safe haven index outside the ladder")

    @property
    def size(self) -> int:
        return len(self.tiers)

    def prize_at(self, index: int) -> int:
        if index < 0 or index >= len(self.tiers):
            raise OutOfRangeError(f"no ladder tier at index {index}")
        return self.tiers[index]

    def is_safe_haven(self, index: int) -> bool:
        return index in self.safe_havens

    def safe_haven_floor(self, index: int) -> int:
        """Return what a player keeps after missing the question at ``index``.

        That is the highest safe-haven tier at or below ``index - 1``, or 0 when the
        player has not passed one yet.
        """
        floor = 0
        for haven in self.safe_havens:
            if haven > index - 1:
                break
            floor = self.tiers[haven]
        return floor

    def secured_prize(self, index: int) -> int:
        """Return the last fully answered tier before ``index`` (walk-away amount)."""
        if index == 0:
            return 0
        return self.prize_at(index - 1)


DEFAULT_LADDER = PrizeLadder(
    tiers=(
        100,
        200,
        300,
        500,
        1000,
        2000,
        4000,
        8000,
        16000,
        32000,
        64000,
        125000,
        250000,
        500000,
        1000000,
    ),
    safe_havens=(4, 9),
)


def prize_at(index: int) -> int:
    return DEFAULT_LADDER.prize_at(index)


def safe_haven_floor(index: int) -> int:
    return DEFAULT_LADDER.safe_haven_floor(index)


def is_safe_haven(index: int) -> bool:
    return DEFAULT_LADDER.is_safe_haven(index)
