"""
Winner-resolution strategies.

Bracket rounds and group round-robins resolve matches differently, so the
scheduler and group engine take a policy object instead of hardcoding a rule.
"""
import random
from abc import ABC, abstractmethod
from typing import Optional

from bracket.exceptions import ConfigurationError
from bracket.models import Match, Player


class WinnerPolicy(ABC):
    """Decides the winner of a single match."""

    name = 'base'

    @abstractmethod
    def choose_winner(self, match: Match) -> Player:
        pass

    def __repr__(self):
        return f"{type(self).__name__}()"


class LowerRankWins(WinnerPolicy):
    """Lower rank number wins; equal ranks favor player1."""

    name = 'lower_rank'

    def choose_winner(self, match: Match) -> Player:
        if match.player1.rank <= match.player2.rank:
            return match.player1
        return match.player2


class RandomWinner(WinnerPolicy):
    """Either player wins with probability 1/2."""

    name = 'random'

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random(seed)

    def choose_winner(self, match: Match) -> Player:
        return match.player1 if self.rng.random() < 0.5 else match.player2


POLICIES = {
    LowerRankWins.name: LowerRankWins,
    RandomWinner.name: RandomWinner,
}


def get_policy(name: str, rng: Optional[random.Random] = None) -> WinnerPolicy:
    """Build the policy registered under ``name``. ``rng`` is only used by random policies."""
    policy_class = POLICIES.get(name)
    if policy_class is None:
        raise ConfigurationError(f"Unknown winner policy: {name}",
                                 {'available': sorted(POLICIES)})
    if policy_class is RandomWinner:
        return RandomWinner(rng=rng)
    return policy_class()
