from __future__ import annotations

import pytest

from ai.strategy import Strategy, STRATEGY_DESCRIPTIONS


def test_parse_accepts_values_names_and_members() -> None:
    assert Strategy.parse("burst") is Strategy.BURST
    assert Strategy.parse("GUARD") is Strategy.GUARD
    assert Strategy.parse(" Evade ") is Strategy.EVADE
    assert Strategy.parse(Strategy.ENGAGE) is Strategy.ENGAGE


def test_parse_rejects_unknown_strategy() -> None:
    with pytest.raises(ValueError):
        Strategy.parse("turtle")


def test_every_strategy_is_described() -> None:
    assert set(STRATEGY_DESCRIPTIONS) == set(Strategy)
