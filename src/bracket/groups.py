"""
Group stage: tier-based group formation, round-robin play and promotion.

Groups of four are filled from the seeded field according to a layout of
group shapes (how many early/regular/wildcard players each group takes).
Every group plays a fixed eight-match round-robin, and the top finishers
by (wins desc, rank asc) are promoted into the bracket's winners pool.
Players that cannot be placed in a complete group are promoted directly,
so the tournament continues as a flat bracket.
"""
import logging
from collections import deque
from typing import Dict, List, Optional

from bracket.exceptions import InsufficientCompositionError
from bracket.models import Match, Player, Tier
from bracket.policies import RandomWinner, WinnerPolicy
from bracket.scheduler import BracketScheduler, sort_by_rank

logger = logging.getLogger(__name__)

GROUP_SIZE = 4

# Index pairs into a group of four. Every pairing occurs, (0,1) and (2,3) twice.
ROUND_ROBIN_PATTERN = (
    (0, 1), (2, 3),
    (0, 2), (1, 3),
    (0, 3), (1, 2),
    (0, 1), (2, 3),
)


class GroupShape:
    """How many players of each tier a group takes, and how many such groups to form."""

    def __init__(self, name: str, count: int, composition: Dict[Tier, int]):
        self.name = name
        self.count = count
        self.composition = {Tier.parse(t): n for t, n in composition.items() if n}

    @property
    def size(self) -> int:
        return sum(self.composition.values())

    def fits(self, buckets: Dict[Tier, deque]) -> bool:
        return all(len(buckets[tier]) >= n for tier, n in self.composition.items())

    def missing(self, buckets: Dict[Tier, deque]) -> Dict[str, int]:
        return {tier.value: n - len(buckets[tier])
                for tier, n in self.composition.items() if len(buckets[tier]) < n}

    def __repr__(self):
        comp = {t.value: n for t, n in self.composition.items()}
        return f"GroupShape(name={self.name}, count={self.count}, composition={comp})"


DEFAULT_LAYOUT = [
    GroupShape('mixed', 6, {Tier.EARLY: 1, Tier.REGULAR: 2, Tier.WILDCARD: 1}),
    GroupShape('standard', 10, {Tier.EARLY: 1, Tier.REGULAR: 3}),
]


class Group:
    def __init__(self, name: str, shape: GroupShape, members: List[Player]):
        self.name = name
        self.shape = shape
        self.members = members
        self.matches: List[Match] = []

    def standings(self) -> List[Dict]:
        """
        Rank members by wins (descending), then seed rank (ascending).

        Returns [{'player': Player, 'wins': n, 'losses': n, 'matches_played': n}, ...]
        """
        table = {p.id: {'player': p, 'wins': 0, 'losses': 0, 'matches_played': 0}
                 for p in self.members}
        for match in self.matches:
            if not match.has_valid_outcome():
                continue
            table[match.winner.id]['wins'] += 1
            table[match.loser().id]['losses'] += 1
            table[match.player1.id]['matches_played'] += 1
            table[match.player2.id]['matches_played'] += 1
        rows = [table[p.id] for p in self.members]
        return sorted(rows, key=lambda row: (-row['wins'], row['player'].rank))

    def top(self, count: int) -> List[Player]:
        return [row['player'] for row in self.standings()[:count]]

    def __repr__(self):
        return f"Group(name={self.name}, shape={self.shape.name}, members={[p.id for p in self.members]})"


class GroupStageResult:
    def __init__(self):
        self.groups: List[Group] = []
        self.promoted: List[Player] = []
        self.flushed: List[Player] = []
        self.shortfall: Optional[Dict] = None

    @property
    def aborted(self) -> bool:
        return self.shortfall is not None


def group_name(index: int) -> str:
    """Group A, Group B, ... Group Z, Group AA, ..."""
    letters = ''
    index += 1
    while index:
        index, rem = divmod(index - 1, 26)
        letters = chr(ord('A') + rem) + letters
    return f"Group {letters}"


def form_groups(players: List[Player], layout: List[GroupShape]) -> List[Group]:
    """
    Fill groups shape by shape from ``players`` (taken in rank order within each tier).

    Raises InsufficientCompositionError, with the formed groups and the
    leftovers attached in ``details``, when players remain that could not be
    placed in a complete group.
    """
    buckets = {tier: deque() for tier in Tier}
    for player in sort_by_rank(players):
        buckets[player.tier].append(player)

    groups = []
    missing = None
    for shape in layout:
        for _ in range(shape.count):
            if not shape.fits(buckets):
                missing = missing or {'shape': shape.name, 'missing': shape.missing(buckets)}
                break
            members = []
            for tier in Tier:
                for _ in range(shape.composition.get(tier, 0)):
                    members.append(buckets[tier].popleft())
            groups.append(Group(group_name(len(groups)), shape, members))

    leftovers = sort_by_rank([p for tier in Tier for p in buckets[tier]])
    if leftovers:
        raise InsufficientCompositionError(
            f"{len(leftovers)} players could not be placed in a complete group",
            {'groups': groups, 'leftovers': leftovers,
             'remaining': {tier.value: len(buckets[tier]) for tier in Tier if buckets[tier]},
             'first_unfilled': missing})
    return groups


class GroupFormationEngine:
    """Runs the group stage against a seeded scheduler."""

    def __init__(self, scheduler: BracketScheduler, policy: Optional[WinnerPolicy] = None,
                 layout: Optional[List[GroupShape]] = None, advance: int = 2):
        self.scheduler = scheduler
        self.policy = policy or RandomWinner()
        self.layout = layout if layout is not None else DEFAULT_LAYOUT
        self.advance = advance

    def run(self) -> GroupStageResult:
        """
        Consume the scheduler's waiting pool, play every group and promote the top finishers.

        A composition shortfall is not fatal: complete groups still play and
        every unplaced player is promoted directly into the winners pool.
        """
        result = GroupStageResult()
        players = self.scheduler.take_waiting_players()
        try:
            groups = form_groups(players, self.layout)
        except InsufficientCompositionError as e:
            groups = e.details['groups']
            result.flushed = e.details['leftovers']
            result.shortfall = {k: e.details[k] for k in ('remaining', 'first_unfilled')}
            logger.warning(f"Group formation incomplete: {e.message}; "
                           f"remaining by tier {result.shortfall['remaining']}. "
                           f"Promoting them directly to the bracket.")
            for player in result.flushed:
                self.scheduler.promote(player)

        result.groups = groups
        logger.info(f"Formed {len(groups)} groups from {len(players)} players")
        for group in groups:
            self.play_group(group)
            finishers = group.top(self.advance)
            for player in finishers:
                self.scheduler.promote(player)
            result.promoted.extend(finishers)
            logger.info(f"{group.name} promotes {', '.join(p.name for p in finishers)}")
        return result

    def play_group(self, group: Group) -> List[Match]:
        """Play the fixed round-robin for ``group`` and report each result."""
        if len(group.members) != GROUP_SIZE:
            raise ValueError(f"{group.name} has {len(group.members)} players; "
                             f"round-robin needs {GROUP_SIZE}")
        for index, (a, b) in enumerate(ROUND_ROBIN_PATTERN):
            match = Match(group.members[a], group.members[b], stage='group',
                          group=group.name, round_number=index // 2 + 1)
            match.resolve(self.policy.choose_winner(match))
            logger.debug(f"{group.name}: {match}")
            self.scheduler.result_logger.record_outcome(match)
            group.matches.append(match)
        return group.matches
