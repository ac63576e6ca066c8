"""
Drives a full championship: registration, seeding, optional group stage
and bracket rounds until one player remains.
"""
import copy
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple

from bracket.config import (DEFAULT_SETTINGS, build_layout, build_policies, deep_merge,
                            validate_settings)
from bracket.groups import GroupFormationEngine, GroupStageResult
from bracket.models import Player
from bracket.result_logger import ResultLogger
from bracket.scheduler import BracketScheduler

logger = logging.getLogger(__name__)


@dataclass
class TournamentOutcome:
    champion: Optional[Player]
    rounds_played: int
    halted: bool = False
    group_stage: Optional[GroupStageResult] = None


def run_tournament(scheduler: BracketScheduler, max_rounds: Optional[int] = None) -> TournamentOutcome:
    """
    Repeat pair -> resolve -> advance until the scheduler is complete.

    ``max_rounds`` bounds the run against a bracket that never converges;
    it defaults to twice the number of live players.
    """
    ceiling = max_rounds if max_rounds is not None else max(2 * scheduler.live_player_count(), 1)
    rounds = 0
    halted = False

    while not scheduler.is_complete():
        if rounds >= ceiling:
            logger.warning(f"Tournament did not finish within {ceiling} rounds. Halting.")
            halted = True
            break
        if not scheduler.create_next_round_pairings():
            break
        scheduler.play_and_resolve_matches()
        rounds += 1
        if not scheduler.advance_to_next_round():
            break

    champion = scheduler.champion()
    if champion is not None:
        logger.info(f"Champion: {champion.name} (ID: {champion.id}, Rank: {champion.rank})")
    else:
        logger.info("No single champion determined, or the tournament ended prematurely.")
    return TournamentOutcome(champion=champion, rounds_played=rounds, halted=halted)


def run_championship(players: Iterable[Player],
                     settings: Optional[Dict[str, Any]] = None) -> Tuple[TournamentOutcome, ResultLogger]:
    """Build a logger and scheduler from ``settings`` and play the whole event."""
    settings = validate_settings(deep_merge(copy.deepcopy(DEFAULT_SETTINGS), settings or {}))
    bracket_policy, group_policy = build_policies(settings)

    result_logger = ResultLogger(max_players=settings['max_players'])
    scheduler = BracketScheduler(result_logger, policy=bracket_policy,
                                 max_players=settings['max_players'])
    for player in players:
        scheduler.add_player(player)

    if not scheduler.initialize(settings['seed_count']):
        return TournamentOutcome(champion=None, rounds_played=0), result_logger

    group_stage = None
    if settings['group_stage']['enabled']:
        engine = GroupFormationEngine(scheduler, policy=group_policy,
                                      layout=build_layout(settings),
                                      advance=settings['group_stage']['advance'])
        group_stage = engine.run()
        scheduler.advance_to_next_round()

    outcome = run_tournament(scheduler, settings['max_rounds'])
    outcome.group_stage = group_stage
    return outcome, result_logger


def _player_entry(player: Player) -> Dict[str, Any]:
    return {'id': player.id, 'name': player.name, 'rank': player.rank}


def build_report(result_logger: ResultLogger, outcome: TournamentOutcome) -> Dict[str, Any]:
    """Plain-data summary of a finished run, suitable for YAML export."""
    report = {
        'champion': _player_entry(outcome.champion) if outcome.champion else None,
        'rounds_played': outcome.rounds_played,
        'halted': outcome.halted,
        'players': [stats.to_dict() for stats in result_logger.all_player_summaries()],
        'matches': [match.to_dict() for match in result_logger.all_matches()],
    }
    group_stage = outcome.group_stage
    if group_stage is not None:
        report['group_stage'] = {
            'groups': [
                {
                    'name': group.name,
                    'shape': group.shape.name,
                    'standings': [
                        {'id': row['player'].id, 'name': row['player'].name,
                         'wins': row['wins'], 'losses': row['losses']}
                        for row in group.standings()
                    ],
                }
                for group in group_stage.groups
            ],
            'promoted': [p.id for p in group_stage.promoted],
            'flushed': [p.id for p in group_stage.flushed],
            'shortfall': group_stage.shortfall,
        }
    return report
