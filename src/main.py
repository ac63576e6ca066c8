# Entry point for running a championship from a roster file

import argparse
import logging
import sys

import yaml

from bracket.config import load_settings
from bracket.exceptions import ConfigurationError
from bracket.models import Player
from bracket.tournament import build_report, run_championship


def load_players(file_path):
    """
    Load players from a YAML roster.

    The file holds a list of {id, name, rank, tier} mappings, either at the
    top level or under a ``players`` key. Entries missing a field or with a
    non-integer rank are skipped with a message.
    """
    with open(file_path, mode='r', encoding='utf-8') as file:
        data = yaml.safe_load(file) or []
    if isinstance(data, dict):
        data = data.get('players', [])

    players = []
    for index, entry in enumerate(data, start=1):
        try:
            players.append(Player(id=entry['id'], name=str(entry['name']).strip(),
                                  rank=int(entry['rank']), tier=entry.get('tier', 'regular')))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            print(f"Warning: skipping roster entry {index} ({entry!r}): {e}", file=sys.stderr)
    return players


def print_report(result_logger, outcome, recent_count):
    print("\n===== TOURNAMENT SIMULATION COMPLETE =====")
    if outcome.champion is not None:
        champion = outcome.champion
        print(f"Champion: {champion.name} (ID: {champion.id}, Rank: {champion.rank})")
    else:
        print("No single champion determined, or the tournament ended prematurely.")
    print(f"Rounds played: {outcome.rounds_played}")

    if outcome.group_stage is not None:
        print(f"\n--- Group Stage ({len(outcome.group_stage.groups)} groups) ---")
        for group in outcome.group_stage.groups:
            rows = ", ".join(f"{row['player'].name} {row['wins']}-{row['losses']}"
                             for row in group.standings())
            print(f"{group.name}: {rows}")
        if outcome.group_stage.aborted:
            print(f"Promoted without group play: {len(outcome.group_stage.flushed)} players")

    recent = result_logger.recent_matches(recent_count)
    print(f"\n--- Recent Match Results (Last {len(recent)} / {result_logger.match_count()} Total) ---")
    if not recent:
        print("No match results have been recorded yet.")
    for match in recent:
        print(match)

    print("\n--- All Player Performance Summaries ---")
    for stats in result_logger.all_player_summaries():
        print(stats)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Simulate a single elimination esports championship'
    )
    parser.add_argument('roster', help='YAML roster file')
    parser.add_argument('--settings', help='YAML settings file')
    parser.add_argument('--output', help='Write a YAML report to this path')
    parser.add_argument('--verbose', action='store_true', help='Log every match')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s %(name)s: %(message)s'
    )

    try:
        settings = load_settings(args.settings)
    except ConfigurationError as e:
        print(f"Invalid settings: {e}", file=sys.stderr)
        return 2

    players = load_players(args.roster)
    if not players:
        print(f"No players loaded. Check {args.roster}", file=sys.stderr)
        return 1

    outcome, result_logger = run_championship(players, settings)
    print_report(result_logger, outcome, settings['report']['recent_matches'])

    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            yaml.safe_dump(build_report(result_logger, outcome), f,
                           default_flow_style=False, sort_keys=False)
        print(f"\nReport saved to: {args.output}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
