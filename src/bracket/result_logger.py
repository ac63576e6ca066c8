"""
Match result logging and per-player performance history.

The logger keeps two views of the same history: a stack with the most
recent result on top, and a queue in chronological order. Reads work on
copies, so reporting never drains the live logs.
"""
import logging
from typing import Dict, List, Optional, Set

from bracket.containers import Queue, Stack
from bracket.exceptions import CapacityExceededError, InvalidOutcomeError
from bracket.models import HistoricalMatch, Match, Player, PlayerId, PlayerReport, PlayerStats

logger = logging.getLogger(__name__)

MAX_TRACKED_PLAYERS = 64


class ResultLogger:
    def __init__(self, max_players: int = MAX_TRACKED_PLAYERS):
        self.max_players = max_players
        self._recent = Stack()
        self._chronological = Queue()
        self._stats: Dict[PlayerId, PlayerStats] = {}
        self._recorded_ids: Set[int] = set()

    def register_player(self, player: Player) -> bool:
        """
        Create a stats entry for ``player``.

        Registering an id twice is a no-op. Returns True only when a new
        entry was created.
        """
        if player.id in self._stats:
            return False
        try:
            self._check_capacity(player)
        except CapacityExceededError as e:
            logger.warning(f"Cannot track stats for {player.name}: {e}")
            return False
        self._stats[player.id] = PlayerStats.for_player(player)
        return True

    def _check_capacity(self, player: Player) -> None:
        if len(self._stats) >= self.max_players:
            raise CapacityExceededError(
                "Player stats table is full",
                {'capacity': self.max_players, 'player': player.id})

    def is_tracking(self, player_id: PlayerId) -> bool:
        return player_id in self._stats

    def record_outcome(self, match: Match) -> bool:
        """
        Log a completed match and update both participants' stats.

        Unplayed matches are ignored. Played matches without a valid winner
        are reported and skipped, as is a match id that was already logged.
        Returns True when the match was logged.
        """
        if not match.played:
            return False
        if match.match_id in self._recorded_ids:
            logger.warning(f"Match {match.match_id} already recorded. Duplicate outcome ignored.")
            return False
        try:
            snapshot = _snapshot(match)
        except InvalidOutcomeError as e:
            logger.warning(f"{e}. Performance log update skipped.")
            return False

        self._recorded_ids.add(match.match_id)
        self._recent.push(snapshot)
        self._chronological.enqueue(snapshot)

        for participant in (match.player1, match.player2):
            stats = self._stats.get(participant.id)
            if stats is None:
                logger.warning(
                    f"Player {participant.name} (ID: {participant.id}) not found in stats "
                    f"tracking. Performance not updated.")
                continue
            if participant.id == snapshot.winner_id:
                stats.record_win()
            else:
                stats.record_loss()

        logger.debug(f"Recorded {snapshot}")
        return True

    def recent_matches(self, count: int = 5) -> List[HistoricalMatch]:
        """Up to ``count`` matches, most recent first."""
        snapshot = self._recent.copy()
        matches = []
        while not snapshot.is_empty() and len(matches) < count:
            matches.append(snapshot.pop())
        return matches

    def all_matches(self) -> List[HistoricalMatch]:
        """Every logged match, oldest first."""
        return self._chronological.copy().drain()

    def player_report(self, player_id: PlayerId) -> Optional[PlayerReport]:
        stats = self._stats.get(player_id)
        if stats is None:
            logger.info(f"Player with ID {player_id} not found or no stats recorded for them.")
            return None
        matches = [m for m in self.all_matches() if m.involves(player_id)]
        return PlayerReport(stats=_copy_stats(stats), matches=matches)

    def all_player_summaries(self) -> List[PlayerStats]:
        return [_copy_stats(stats) for stats in self._stats.values()]

    def match_count(self) -> int:
        return self._chronological.size()

    def latest_match(self) -> Optional[HistoricalMatch]:
        if self._recent.is_empty():
            return None
        return self._recent.peek()


def _snapshot(match: Match) -> HistoricalMatch:
    if not match.has_valid_outcome():
        raise InvalidOutcomeError(
            f"Match {match.match_id} outcome is unclear",
            {'winner': getattr(match.winner, 'id', None)})
    return HistoricalMatch.from_match(match)


def _copy_stats(stats: PlayerStats) -> PlayerStats:
    clone = PlayerStats(stats.player_id, stats.player_name, stats.initial_rank)
    clone.wins = stats.wins
    clone.losses = stats.losses
    return clone
