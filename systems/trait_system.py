"""
trait_system.py – Persistent run-to-run traits.

Six fixed traits are granted by the growth resolver and carried into
the next run. Unlike timed buffs, a trait never expires during a run.

Architecture:
- TraitDefinition (immutable catalogue entry)
- TraitModifiers  (fixed modifier struct consumed by combat / AI)
- compute_modifiers() (rebuilds the struct from an active trait set)

Trait effects never mutate the agent directly; the agent recomputes
its TraitModifiers from its active set whenever the set changes, so
stacking order is the catalogue order below.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from settings import (
    PHANTOM_TRACE_REDUCTION, REFLEX_BURST_BONUS, OVERCLOCK_DASH_BONUS,
    BLOOD_EXCHANGE_LIFESTEAL, ADAPTIVE_SHIELD_REDUCTION,
    THREAT_REDIRECT_SNIPER_WEIGHT,
)

logger = logging.getLogger(__name__)


class TraitCategory(str, Enum):
    DEFENSIVE = "defensive"
    OFFENSIVE = "offensive"
    MOBILITY = "mobility"
    UTILITY = "utility"


# ══════════════════════════════════════════════════════════
#  Modifier struct
# ══════════════════════════════════════════════════════════

@dataclass
class TraitModifiers:
    """Numeric modifiers derived from the active trait set."""

    post_evade_reduction: float = 0.0   # extra reduction while window is open
    post_evade_damage_bonus: float = 0.0  # one-shot multiplier bonus per window
    dash_distance_bonus: float = 0.0    # fraction added to ENGAGE dash speed
    lifesteal_fraction: float = 0.0
    guard_reduction_bonus: float = 0.0
    sniper_threat_weight: float = 1.0   # multiplies sniper threat scores


# ══════════════════════════════════════════════════════════
#  Trait definitions
# ══════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TraitDefinition:
    """Immutable catalogue entry.

    ``additive`` fields are summed into TraitModifiers, ``multiplicative``
    fields are multiplied in.
    """

    id: str
    name: str
    description: str
    category: TraitCategory
    additive: dict = field(default_factory=dict)
    multiplicative: dict = field(default_factory=dict)

    def apply_to(self, modifiers: TraitModifiers) -> None:
        for attr, amount in self.additive.items():
            setattr(modifiers, attr, getattr(modifiers, attr) + amount)
        for attr, factor in self.multiplicative.items():
            setattr(modifiers, attr, getattr(modifiers, attr) * factor)


TRAITS: dict[str, TraitDefinition] = {
    # ── Dodge traits ──────────────────────────────────────
    "T1_PHANTOM_TRACE": TraitDefinition(
        id="T1_PHANTOM_TRACE",
        name="Phantom Trace",
        description="-50% damage taken during the post-evade window",
        category=TraitCategory.DEFENSIVE,
        additive={"post_evade_reduction": PHANTOM_TRACE_REDUCTION},
    ),
    "T2_REFLEX_BURST": TraitDefinition(
        id="T2_REFLEX_BURST",
        name="Reflex Burst",
        description="+40% damage on the first hit during the post-evade window",
        category=TraitCategory.OFFENSIVE,
        additive={"post_evade_damage_bonus": REFLEX_BURST_BONUS},
    ),
    # ── Aggression traits ─────────────────────────────────
    "T3_OVERCLOCK_CHARGE": TraitDefinition(
        id="T3_OVERCLOCK_CHARGE",
        name="Overclock Charge",
        description="+25% Engage dash distance",
        category=TraitCategory.OFFENSIVE,
        additive={"dash_distance_bonus": OVERCLOCK_DASH_BONUS},
    ),
    "T4_BLOOD_EXCHANGE": TraitDefinition(
        id="T4_BLOOD_EXCHANGE",
        name="Blood Exchange",
        description="Heal for 3% of damage dealt",
        category=TraitCategory.OFFENSIVE,
        additive={"lifesteal_fraction": BLOOD_EXCHANGE_LIFESTEAL},
    ),
    # ── Defense traits ────────────────────────────────────
    "T5_ADAPTIVE_SHIELD": TraitDefinition(
        id="T5_ADAPTIVE_SHIELD",
        name="Adaptive Shield",
        description="Guard damage reduction strengthened",
        category=TraitCategory.DEFENSIVE,
        additive={"guard_reduction_bonus": ADAPTIVE_SHIELD_REDUCTION},
    ),
    # ── Utility traits ────────────────────────────────────
    "T6_THREAT_REDIRECT": TraitDefinition(
        id="T6_THREAT_REDIRECT",
        name="Threat Redirect",
        description="-50% sniper threat weight",
        category=TraitCategory.UTILITY,
        multiplicative={"sniper_threat_weight": THREAT_REDIRECT_SNIPER_WEIGHT},
    ),
}


def get_trait(trait_id: str) -> TraitDefinition | None:
    return TRAITS.get(trait_id)


def get_traits_by_category(category: TraitCategory) -> list[TraitDefinition]:
    return [t for t in TRAITS.values() if t.category == category]


def compute_modifiers(trait_ids: Iterable[str]) -> TraitModifiers:
    """Rebuild modifiers from scratch for *trait_ids*.

    Unknown identifiers are skipped. Iteration follows catalogue order
    so the result never depends on the order traits were activated.
    """
    active = set(trait_ids)
    modifiers = TraitModifiers()
    for trait_id, trait in TRAITS.items():
        if trait_id in active:
            trait.apply_to(modifiers)
    return modifiers
