"""Dice rolls for the session chat.

Only single fixed-side dice are resolved. Formula rolls such as ``2d20+5``
are echoed verbatim in the message and never evaluated.
"""

from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import Any, Optional

from letsroll.schemas.session import MessageKind

STANDARD_DICE = (4, 6, 8, 10, 12, 20, 100)

_rng = random.SystemRandom()


class UnsupportedDiceError(ValueError):
    """Raised for dice the roller does not offer."""


def roll_die(sides: int, *, rng: random.Random | None = None) -> int:
    """Uniform integer in ``[1, sides]``."""
    if sides not in STANDARD_DICE:
        raise UnsupportedDiceError(sides)
    return (rng or _rng).randint(1, sides)


def fixed_roll_content(sides: int, result: int) -> str:
    return f"Rolou 1d{sides}: **{result}**"


def formula_roll_content(formula: str) -> str:
    return f"Rolou fórmula: {formula} (Simulado)"


def _message_id(now: datetime) -> str:
    return str(int(now.timestamp() * 1000))


def build_roll_message(
    *,
    campaign_id: Any,
    user: dict[str, Any],
    sides: Optional[int] = None,
    formula: Optional[str] = None,
    rng: random.Random | None = None,
) -> dict[str, Any]:
    """Build the DICE_ROLL chat message the session room receives.

    Exactly one of ``sides`` or ``formula`` has to be given.
    """
    if sides is not None:
        content = fixed_roll_content(sides, roll_die(sides, rng=rng))
    elif formula and formula.strip():
        content = formula_roll_content(formula.strip())
    else:
        raise UnsupportedDiceError("sides or formula required")

    now = datetime.now(timezone.utc)
    return {
        "campaignId": campaign_id,
        "content": content,
        "type": MessageKind.DICE_ROLL.value,
        "user": user,
        "timestamp": now.isoformat(),
        "id": _message_id(now),
    }
