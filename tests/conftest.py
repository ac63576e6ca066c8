"""
Shared pytest fixtures for the bracket core tests.

Running tests:
    pytest tests/
"""
import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from bracket.models import Player, Tier
from bracket.policies import LowerRankWins
from bracket.result_logger import ResultLogger
from bracket.scheduler import BracketScheduler


def _make_players(count, tier=Tier.REGULAR, start_id=1, start_rank=1):
    return [Player(id=start_id + i, name=f"P{start_id + i}", rank=start_rank + i, tier=tier)
            for i in range(count)]


@pytest.fixture
def make_players():
    """Factory for players with consecutive ids and ranks."""
    return _make_players


@pytest.fixture
def result_logger():
    return ResultLogger()


@pytest.fixture
def scheduler(result_logger):
    return BracketScheduler(result_logger, policy=LowerRankWins())


@pytest.fixture
def three_players():
    return [
        Player(1, "Ann", 1),
        Player(2, "Bo", 2),
        Player(3, "Cy", 3),
    ]


@pytest.fixture
def seeded_scheduler(scheduler):
    """Factory: register players on the shared scheduler and seed them."""
    def _seed(players):
        for player in players:
            scheduler.add_player(player)
        scheduler.initialize()
        return scheduler
    return _seed
