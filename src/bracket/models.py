"""
Value records for players, matches and match history.
"""
import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from bracket.exceptions import InvalidOutcomeError

PlayerId = Union[int, str]


class Tier(Enum):
    """Registration category, used only to shape group-stage composition."""
    EARLY = 'early'
    REGULAR = 'regular'
    WILDCARD = 'wildcard'

    @classmethod
    def parse(cls, value) -> "Tier":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown tier: {value!r}") from None


class Player:
    def __init__(self, id: PlayerId, name: str, rank: int, tier=Tier.REGULAR):
        self.id = id
        self.name = name
        self.rank = rank
        self.tier = Tier.parse(tier)

    def __eq__(self, other):
        if not isinstance(other, Player):
            return NotImplemented
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)

    def __str__(self):
        return f"ID: {self.id}, Name: {self.name}, Rank: {self.rank}"

    def __repr__(self):
        return f"Player(id={self.id!r}, name={self.name!r}, rank={self.rank}, tier={self.tier.value})"


class Match:
    """A pairing of two players. The winner is set only once the match is played."""

    _ids = itertools.count(1)

    def __init__(self, player1: Player, player2: Player, stage: str = 'bracket',
                 group: Optional[str] = None, round_number: Optional[int] = None):
        self.match_id = next(Match._ids)
        self.player1 = player1
        self.player2 = player2
        self.winner: Optional[Player] = None
        self.played = False
        self.stage = stage
        self.group = group
        self.round_number = round_number

    def involves(self, player_id: PlayerId) -> bool:
        return player_id in (self.player1.id, self.player2.id)

    def loser(self) -> Optional[Player]:
        if self.winner is None:
            return None
        return self.player2 if self.winner == self.player1 else self.player1

    def resolve(self, winner: Player) -> None:
        """
        Mark the match played with ``winner``, who must be one of the participants.

        A match is decided once; resolving a played match raises InvalidOutcomeError.
        """
        if self.played:
            raise InvalidOutcomeError(
                f"Match {self.match_id} has already been played",
                {'winner': getattr(self.winner, 'id', None)})
        if winner is None or not self.involves(winner.id):
            raise InvalidOutcomeError(
                f"Match {self.match_id}: winner must be one of the two participants",
                {'winner': getattr(winner, 'id', None),
                 'players': (self.player1.id, self.player2.id)})
        self.winner = self.player1 if winner == self.player1 else self.player2
        self.played = True

    def has_valid_outcome(self) -> bool:
        return self.played and self.winner is not None and self.involves(self.winner.id)

    def __str__(self):
        text = f"Match ID: {self.match_id} | {self.player1.name} vs {self.player2.name}"
        if not self.played:
            return text + " | Status: Pending"
        if self.winner is None:
            return text + " | Winner: Undecided"
        return text + f" | Winner: {self.winner.name}"

    def __repr__(self):
        return (f"Match(match_id={self.match_id}, player1={self.player1.id!r}, "
                f"player2={self.player2.id!r}, winner={getattr(self.winner, 'id', None)!r}, "
                f"played={self.played})")


@dataclass(frozen=True)
class HistoricalMatch:
    """Immutable snapshot of a resolved match."""

    match_id: int
    player1_id: PlayerId
    player1_name: str
    player2_id: PlayerId
    player2_name: str
    winner_id: PlayerId
    winner_name: str
    stage: str = 'bracket'
    group: Optional[str] = None
    round_number: Optional[int] = None

    @classmethod
    def from_match(cls, match: Match) -> "HistoricalMatch":
        return cls(
            match_id=match.match_id,
            player1_id=match.player1.id,
            player1_name=match.player1.name,
            player2_id=match.player2.id,
            player2_name=match.player2.name,
            winner_id=match.winner.id,
            winner_name=match.winner.name,
            stage=match.stage,
            group=match.group,
            round_number=match.round_number,
        )

    def involves(self, player_id: PlayerId) -> bool:
        return player_id in (self.player1_id, self.player2_id)

    def to_dict(self) -> dict:
        return {
            'match_id': self.match_id,
            'player1': {'id': self.player1_id, 'name': self.player1_name},
            'player2': {'id': self.player2_id, 'name': self.player2_name},
            'winner': {'id': self.winner_id, 'name': self.winner_name},
            'stage': self.stage,
            'group': self.group,
            'round': self.round_number,
        }

    def __str__(self):
        return (f"Match ID: {self.match_id} | P1: {self.player1_name} (ID:{self.player1_id})"
                f" vs P2: {self.player2_name} (ID:{self.player2_id})"
                f" | Winner: {self.winner_name} (ID:{self.winner_id})")


class PlayerStats:
    """Win/loss aggregate for one registered player."""

    def __init__(self, player_id: PlayerId, player_name: str, initial_rank: int):
        self.player_id = player_id
        self.player_name = player_name
        self.initial_rank = initial_rank
        self.wins = 0
        self.losses = 0

    @classmethod
    def for_player(cls, player: Player) -> "PlayerStats":
        return cls(player.id, player.name, player.rank)

    def record_win(self):
        self.wins += 1

    def record_loss(self):
        self.losses += 1

    @property
    def total_matches_played(self) -> int:
        return self.wins + self.losses

    @property
    def win_rate(self) -> float:
        played = self.total_matches_played
        return self.wins / played if played else 0.0

    def to_dict(self) -> dict:
        return {
            'id': self.player_id,
            'name': self.player_name,
            'initial_rank': self.initial_rank,
            'wins': self.wins,
            'losses': self.losses,
            'matches_played': self.total_matches_played,
        }

    def __str__(self):
        return (f"Player: {self.player_name} (ID: {self.player_id}, Initial Rank: {self.initial_rank}) | "
                f"Wins: {self.wins}, Losses: {self.losses}, Matches Played: {self.total_matches_played}")

    def __repr__(self):
        return (f"PlayerStats(player_id={self.player_id!r}, wins={self.wins}, "
                f"losses={self.losses})")


@dataclass
class PlayerReport:
    """A player's aggregate stats plus every logged match they played, oldest first."""

    stats: PlayerStats
    matches: List[HistoricalMatch] = field(default_factory=list)
