"""Shared fixtures for the arena test-suite."""
from __future__ import annotations

import pytest

from entities.agent import Agent
from systems.run_recorder import MemoryStore, RunRepository


@pytest.fixture
def agent() -> Agent:
    return Agent()


@pytest.fixture
def repository() -> RunRepository:
    return RunRepository(MemoryStore())
