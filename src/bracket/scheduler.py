"""
Single elimination bracket scheduling.

Players move through three queues: ``waiting`` (eligible for the next
pairing), ``pending`` (inside an unresolved match) and ``winners`` (won or
received a bye, awaiting promotion back to ``waiting``). A player is in at
most one of them at a time.
"""
import logging
import math
from typing import List, Optional

from bracket.containers import Queue
from bracket.exceptions import CapacityExceededError, DuplicatePlayerError
from bracket.models import Match, Player
from bracket.policies import LowerRankWins, WinnerPolicy
from bracket.result_logger import ResultLogger

logger = logging.getLogger(__name__)

MAX_PLAYERS = 64


def get_round_name(players_in_round: int) -> str:
    """Get the name of a round based on how many players it starts with."""
    if players_in_round == 2:
        return "Final"
    elif players_in_round in (3, 4):
        return "Semifinal"
    elif players_in_round in range(5, 9):
        return "Quarterfinal"
    else:
        return f"Round of {players_in_round}"


def calculate_total_rounds(num_players: int) -> int:
    """Number of rounds a field of ``num_players`` needs to produce one champion."""
    if num_players <= 1:
        return 0
    return math.ceil(math.log2(num_players))


def sort_by_rank(players: List[Player]) -> List[Player]:
    """Stable ascending sort by rank (lower rank number = stronger seed)."""
    return sorted(players, key=lambda p: p.rank)


def fold_pairings(players: List[Player]):
    """
    Pair an ordered pool first vs last, second vs second-last, and so on.

    Returns (pairs, bye) where bye is the middle player of an odd pool.
    """
    pairs = []
    i, j = 0, len(players) - 1
    while i < j:
        pairs.append((players[i], players[j]))
        i += 1
        j -= 1
    bye = players[i] if i == j else None
    return pairs, bye


class BracketScheduler:
    def __init__(self, result_logger: ResultLogger, policy: Optional[WinnerPolicy] = None,
                 max_players: int = MAX_PLAYERS):
        self.result_logger = result_logger
        self.policy = policy or LowerRankWins()
        self.max_players = max_players
        self.roster: List[Player] = []
        self.round_number = 0
        self.seeded = False
        self._waiting = Queue()
        self._pending = Queue()
        self._winners = Queue()

    # Registration

    def add_player(self, player: Player) -> bool:
        """Register ``player`` with the roster and the result logger. Returns False on rejection."""
        try:
            self._validate_new_player(player)
        except (DuplicatePlayerError, CapacityExceededError) as e:
            logger.warning(f"Cannot add {player.name}: {e}")
            return False
        self.roster.append(player)
        self.result_logger.register_player(player)
        return True

    def _validate_new_player(self, player: Player) -> None:
        for existing in self.roster:
            if existing.id == player.id:
                raise DuplicatePlayerError(
                    f"Player with ID {player.id} ({existing.name}) already exists",
                    {'id': player.id})
        if len(self.roster) >= self.max_players:
            raise CapacityExceededError(
                f"Maximum capacity ({self.max_players}) reached",
                {'id': player.id})

    def roster_size(self) -> int:
        return len(self.roster)

    def get_player(self, player_id) -> Optional[Player]:
        for player in self.roster:
            if player.id == player_id:
                return player
        return None

    # Seeding

    def initialize(self, seed_count: int = 0) -> bool:
        """
        Sort the roster by rank and seed it into the waiting pool.

        ``seed_count`` limits seeding to the top N players; 0 or a value
        larger than the roster seeds everyone.
        """
        if not self.roster:
            logger.info("No players added to the tournament to initialize.")
            return False
        if self.seeded:
            logger.warning("Tournament already initialized; ignoring repeated seeding.")
            return False

        self.roster = sort_by_rank(self.roster)
        count = seed_count if 0 < seed_count <= len(self.roster) else len(self.roster)
        for player in self.roster[:count]:
            self._waiting.enqueue(player)
        self.seeded = True

        label = "All" if count == len(self.roster) else "Top"
        logger.info(f"Initial seeding ({label} {count} players by rank): "
                    f"{', '.join(f'{p.name} ({p.rank})' for p in self.roster[:count])}")
        logger.info(f"Bracket of {count} players needs {calculate_total_rounds(count)} rounds.")
        if count > 1 and count % 2:
            logger.info(f"Odd number of players ({count}) in the first round. "
                        f"One player will receive a bye.")
        return True

    def take_waiting_players(self) -> List[Player]:
        """Drain the waiting pool in rank order, handing ownership to the caller."""
        return sort_by_rank(self._waiting.drain())

    def promote(self, player: Player) -> None:
        """Place ``player`` straight into the winners pool."""
        self._winners.enqueue(player)

    # Rounds

    def create_next_round_pairings(self) -> bool:
        """
        Pair every waiting player for the next round.

        Returns True iff at least one match was scheduled or a bye granted.
        """
        if self._waiting.size() < 2:
            logger.debug("No pairings possible: fewer than two players waiting.")
            return False

        pool = sort_by_rank(self._waiting.drain())
        self.round_number += 1
        logger.info(f"Round {self.round_number} ({get_round_name(len(pool))}): "
                    f"pairing {len(pool)} players")

        pairs, bye = fold_pairings(pool)
        for player1, player2 in pairs:
            match = Match(player1, player2, stage='bracket', round_number=self.round_number)
            self._pending.enqueue(match)
            logger.debug(f"Scheduled: {player1.name} vs {player2.name}")

        if bye is not None:
            logger.info(f"{bye.name} gets a BYE and advances directly to the winners' pool.")
            self._winners.enqueue(bye)

        return bool(pairs) or bye is not None

    def play_and_resolve_matches(self) -> int:
        """Resolve every pending match with the active policy. Returns how many were played."""
        played = 0
        while not self._pending.is_empty():
            match = self._pending.dequeue()
            match.resolve(self.policy.choose_winner(match))
            logger.info(f"{match.player1.name} vs {match.player2.name} -> Winner: {match.winner.name}")
            self.result_logger.record_outcome(match)
            self._winners.enqueue(match.winner)
            played += 1
        return played

    def advance_to_next_round(self) -> bool:
        """
        Move every winner into the waiting pool.

        Returns False when there is nothing to advance or the tournament has
        concluded, including the final move of the sole remaining player.
        """
        if self._winners.is_empty():
            return False

        if (self._winners.size() == 1 and self._waiting.is_empty()
                and self._pending.is_empty()):
            finalist = self._winners.dequeue()
            self._waiting.enqueue(finalist)
            logger.info(f"{finalist.name} is the sole remaining player.")
            return False

        while not self._winners.is_empty():
            player = self._winners.dequeue()
            self._waiting.enqueue(player)
            logger.debug(f"{player.name} advances.")
        return True

    def is_complete(self) -> bool:
        return (self._waiting.size() == 1 and self._pending.is_empty()
                and self._winners.is_empty())

    def champion(self) -> Optional[Player]:
        """The sole remaining player, or None while the tournament is still running."""
        if not self.is_complete():
            return None
        return self._waiting.peek()

    def live_player_count(self) -> int:
        return (self._waiting.size() + 2 * self._pending.size()
                + self._winners.size())

    # Snapshots

    def waiting_players(self) -> List[Player]:
        return self._waiting.copy().drain()

    def pending_matches(self) -> List[Match]:
        return self._pending.copy().drain()

    def winners_pool(self) -> List[Player]:
        return self._winners.copy().drain()
