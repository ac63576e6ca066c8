"""
Unit tests for the ResultLogger: match history and per-player stats.
"""
import logging
import pytest

from bracket.models import Match, Player
from bracket.result_logger import ResultLogger


def played_match(player1, player2, winner):
    match = Match(player1, player2)
    match.resolve(winner)
    return match


@pytest.fixture
def trio(result_logger):
    ann, bo, cy = Player(1, "Ann", 1), Player(2, "Bo", 2), Player(3, "Cy", 3)
    for player in (ann, bo, cy):
        result_logger.register_player(player)
    return ann, bo, cy


class TestRegistration:
    """Tests for stats registration."""

    def test_register_creates_stats(self, result_logger):
        assert result_logger.register_player(Player(1, "Ann", 4)) is True
        summaries = result_logger.all_player_summaries()
        assert len(summaries) == 1
        assert summaries[0].initial_rank == 4

    def test_register_is_idempotent(self, result_logger):
        result_logger.register_player(Player(1, "Ann", 1))
        assert result_logger.register_player(Player(1, "Ann again", 9)) is False
        summaries = result_logger.all_player_summaries()
        assert len(summaries) == 1
        assert summaries[0].player_name == "Ann"

    def test_register_rejects_when_full(self, caplog):
        result_logger = ResultLogger(max_players=2)
        result_logger.register_player(Player(1, "A", 1))
        result_logger.register_player(Player(2, "B", 2))
        with caplog.at_level(logging.WARNING):
            assert result_logger.register_player(Player(3, "C", 3)) is False
        assert "full" in caplog.text
        assert not result_logger.is_tracking(3)

    def test_summaries_keep_insertion_order(self, result_logger):
        for player in (Player(9, "Z", 9), Player(1, "A", 1), Player(5, "M", 5)):
            result_logger.register_player(player)
        assert [s.player_id for s in result_logger.all_player_summaries()] == [9, 1, 5]


class TestRecordOutcome:
    """Tests for recording matches."""

    def test_valid_match_updates_logs_and_stats(self, result_logger, trio):
        ann, bo, _ = trio
        assert result_logger.record_outcome(played_match(ann, bo, ann)) is True
        assert result_logger.match_count() == 1
        report_ann = result_logger.player_report(1)
        report_bo = result_logger.player_report(2)
        assert (report_ann.stats.wins, report_ann.stats.losses) == (1, 0)
        assert (report_bo.stats.wins, report_bo.stats.losses) == (0, 1)

    def test_unplayed_match_changes_nothing(self, result_logger, trio):
        ann, bo, _ = trio
        before = [s.to_dict() for s in result_logger.all_player_summaries()]
        assert result_logger.record_outcome(Match(ann, bo)) is False
        assert result_logger.match_count() == 0
        assert result_logger.recent_matches(5) == []
        assert [s.to_dict() for s in result_logger.all_player_summaries()] == before

    def test_played_match_without_winner_is_skipped(self, result_logger, trio, caplog):
        ann, bo, _ = trio
        match = Match(ann, bo)
        match.played = True
        with caplog.at_level(logging.WARNING):
            assert result_logger.record_outcome(match) is False
        assert "outcome is unclear" in caplog.text
        assert result_logger.match_count() == 0

    def test_winner_outside_match_is_skipped(self, result_logger, trio):
        ann, bo, cy = trio
        match = Match(ann, bo)
        match.played = True
        match.winner = cy
        assert result_logger.record_outcome(match) is False
        assert result_logger.all_matches() == []

    def test_same_match_recorded_once(self, result_logger, trio, caplog):
        ann, bo, _ = trio
        match = played_match(ann, bo, ann)
        assert result_logger.record_outcome(match) is True
        with caplog.at_level(logging.WARNING):
            assert result_logger.record_outcome(match) is False
        assert "already recorded" in caplog.text
        assert result_logger.match_count() == 1
        assert len(result_logger.recent_matches(5)) == 1
        stats = {s.player_id: (s.wins, s.losses) for s in result_logger.all_player_summaries()}
        assert stats[1] == (1, 0)
        assert stats[2] == (0, 1)

    def test_missing_participant_still_logged(self, result_logger, trio, caplog):
        ann, _, _ = trio
        stranger = Player(99, "Stranger", 50)
        with caplog.at_level(logging.WARNING):
            assert result_logger.record_outcome(played_match(ann, stranger, stranger)) is True
        assert "not found in stats tracking" in caplog.text
        assert result_logger.match_count() == 1
        assert result_logger.player_report(1).stats.losses == 1
        assert result_logger.player_report(99) is None


class TestQueries:
    """Tests for non-destructive history queries."""

    def test_recent_matches_most_recent_first(self, result_logger, trio):
        ann, bo, cy = trio
        first = played_match(ann, bo, ann)
        second = played_match(bo, cy, bo)
        third = played_match(ann, cy, cy)
        for match in (first, second, third):
            result_logger.record_outcome(match)
        recent = result_logger.recent_matches(2)
        assert [m.match_id for m in recent] == [third.match_id, second.match_id]
        assert result_logger.latest_match().match_id == third.match_id

    def test_recent_matches_bounded_by_log_size(self, result_logger, trio):
        ann, bo, _ = trio
        result_logger.record_outcome(played_match(ann, bo, ann))
        assert len(result_logger.recent_matches(10)) == 1
        assert result_logger.recent_matches(0) == []

    def test_all_matches_chronological(self, result_logger, trio):
        ann, bo, cy = trio
        matches = [played_match(ann, bo, ann), played_match(bo, cy, cy), played_match(ann, cy, ann)]
        for match in matches:
            result_logger.record_outcome(match)
        assert [m.match_id for m in result_logger.all_matches()] == [m.match_id for m in matches]

    def test_reads_do_not_drain_logs(self, result_logger, trio):
        ann, bo, _ = trio
        result_logger.record_outcome(played_match(ann, bo, bo))
        for _ in range(3):
            assert len(result_logger.all_matches()) == 1
            assert len(result_logger.recent_matches(5)) == 1
        assert result_logger.match_count() == 1

    def test_player_report_lists_only_their_matches(self, result_logger, trio):
        ann, bo, cy = trio
        m1 = played_match(ann, bo, ann)
        m2 = played_match(bo, cy, cy)
        m3 = played_match(cy, ann, ann)
        for match in (m1, m2, m3):
            result_logger.record_outcome(match)
        report = result_logger.player_report(1)
        assert [m.match_id for m in report.matches] == [m1.match_id, m3.match_id]
        assert report.stats.wins == 2

    def test_player_report_unknown_id(self, result_logger):
        assert result_logger.player_report(404) is None

    def test_summaries_are_copies(self, result_logger, trio):
        summaries = result_logger.all_player_summaries()
        summaries[0].record_win()
        assert result_logger.player_report(1).stats.wins == 0

    def test_latest_match_empty(self, result_logger):
        assert result_logger.latest_match() is None

    def test_wins_plus_losses_match_log_appearances(self, result_logger, trio):
        ann, bo, cy = trio
        for p1, p2, w in [(ann, bo, bo), (bo, cy, bo), (ann, cy, ann), (ann, bo, ann)]:
            result_logger.record_outcome(played_match(p1, p2, w))
        log = result_logger.all_matches()
        for stats in result_logger.all_player_summaries():
            appearances = sum(1 for m in log if m.involves(stats.player_id))
            assert stats.wins + stats.losses == appearances
