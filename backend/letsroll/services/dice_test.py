"""Tests for session dice rolls.

Tests cover:
- Range of fixed dice
- Message contents for fixed and formula rolls
- Rejection of unsupported dice
"""

import random

import pytest

from letsroll.services.dice import (
    STANDARD_DICE,
    UnsupportedDiceError,
    build_roll_message,
    fixed_roll_content,
    formula_roll_content,
    roll_die,
)


@pytest.mark.unit
@pytest.mark.parametrize("sides", STANDARD_DICE)
def test_roll_die_stays_in_range(sides):
    rng = random.Random(sides)
    results = {roll_die(sides, rng=rng) for _ in range(500)}
    assert min(results) >= 1
    assert max(results) <= sides


@pytest.mark.unit
def test_roll_die_hits_both_ends():
    rng = random.Random(42)
    results = {roll_die(4, rng=rng) for _ in range(200)}
    assert results == {1, 2, 3, 4}


@pytest.mark.unit
@pytest.mark.parametrize("sides", [0, 3, 7, 1000])
def test_roll_die_rejects_non_standard_dice(sides):
    with pytest.raises(UnsupportedDiceError):
        roll_die(sides)


@pytest.mark.unit
def test_contents():
    assert fixed_roll_content(20, 17) == "Rolou 1d20: **17**"
    assert formula_roll_content("3d6+2") == "Rolou fórmula: 3d6+2 (Simulado)"


@pytest.mark.unit
def test_build_roll_message_fixed_die():
    user = {"username": "mestre", "avatar": None}
    message = build_roll_message(campaign_id="12", user=user, sides=100, rng=random.Random(1))

    assert message["campaignId"] == "12"
    assert message["type"] == "DICE_ROLL"
    assert message["user"] == user
    assert message["content"].startswith("Rolou 1d100: **")
    assert message["id"].isdigit()
    assert message["timestamp"]


@pytest.mark.unit
def test_build_roll_message_formula_is_not_evaluated():
    message = build_roll_message(campaign_id=3, user={"username": "a"}, formula=" 2d20+5 ")
    assert message["content"] == "Rolou fórmula: 2d20+5 (Simulado)"


@pytest.mark.unit
def test_build_roll_message_requires_sides_or_formula():
    with pytest.raises(UnsupportedDiceError):
        build_roll_message(campaign_id=3, user={"username": "a"}, formula="   ")
