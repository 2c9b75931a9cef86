"""Number generation and match scoring for 6/49 tickets and draws."""

import random
from collections.abc import Iterable

PICK_COUNT = 6
MIN_NUMBER = 1
MAX_NUMBER = 49

# match count -> prize label; anything else is "No prize"
PRIZE_TABLE = {
    6: "Jackpot",
    5: "Big prize",
    4: "Small prize",
}
NO_PRIZE = "No prize"


def generate_numbers(rng: random.Random) -> list[int]:
    """Draw 6 distinct numbers in [1, 49], sorted ascending.

    Duplicates are rejected and resampled until 6 unique values are collected.
    """
    picked: set[int] = set()
    while len(picked) < PICK_COUNT:
        picked.add(rng.randint(MIN_NUMBER, MAX_NUMBER))
    return sorted(picked)


def validate_numbers(numbers: list[int]) -> list[int]:
    if len(numbers) != PICK_COUNT or len(set(numbers)) != PICK_COUNT:
        raise ValueError(f"expected {PICK_COUNT} distinct numbers, got {numbers}")
    out_of_range = [n for n in numbers if n < MIN_NUMBER or n > MAX_NUMBER]
    if out_of_range:
        raise ValueError(f"numbers out of range {MIN_NUMBER}..{MAX_NUMBER}: {out_of_range}")
    return numbers


def count_matches(ticket_numbers: Iterable[int], draw_numbers: Iterable[int]) -> int:
    return len(set(ticket_numbers) & set(draw_numbers))


def prize_for(matches: int) -> str:
    return PRIZE_TABLE.get(matches, NO_PRIZE)
