"""
strategy.py – The four player-selectable combat strategies.

    ENGAGE – aggressive forward combat, dash-attacks the primary threat
    GUARD  – damage reduction, holds ground, retreats when crowded
    EVADE  – keeps a safe distance, dash-evades with i-frames
    BURST  – short high-damage window followed by fatigue
"""

from __future__ import annotations

from enum import Enum


class Strategy(str, Enum):
    """Closed set of combat strategies."""

    ENGAGE = "engage"
    GUARD = "guard"
    EVADE = "evade"
    BURST = "burst"

    @classmethod
    def parse(cls, value) -> "Strategy":
        """Accept a Strategy, its value ("burst") or its name ("BURST")."""
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for member in cls:
            if text.lower() == member.value:
                return member
        raise ValueError(f"Unknown strategy: {value!r}")


STRATEGY_DESCRIPTIONS: dict[Strategy, str] = {
    Strategy.ENGAGE: "Aggressive forward combat",
    Strategy.GUARD: "Defensive damage reduction",
    Strategy.EVADE: "Mobility and repositioning",
    Strategy.BURST: "High damage window",
}
