"""Shared test fixtures for engine tests."""

import random

import pytest

from chesscrawl.game.state import Board


class FixedRandom(random.Random):
    """random.Random whose random() always returns the same value."""

    def __init__(self, value: float):
        super().__init__(0)
        self.value = value

    def random(self):
        return self.value


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def board():
    """Empty 8x8 board."""
    return Board(8, 8)


@pytest.fixture
def fixed_random():
    return FixedRandom
