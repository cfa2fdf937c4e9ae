"""systems package – Combat, traits, projectiles, arena, telemetry, growth, run history, battle loop."""

from .combat_system import CombatSystem, CombatResult
from .trait_system import TraitDefinition, TraitModifiers, TraitCategory, TRAITS
from .projectile_system import ProjectileSystem, Projectile
from .arena import Arena, ElectricBarrier
from .run_timer import RunTimer
from .telemetry import Telemetry, TelemetryRecord, RunResult
from .growth_resolver import GrowthResolver, GrowthResult, PlaystyleProfile
from .run_recorder import RunRecord, RunRepository, JsonFileStore, MemoryStore
