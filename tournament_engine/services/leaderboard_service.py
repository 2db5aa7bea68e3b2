"""
Leaderboard computation across completed matches.

The leaderboard holds no state of its own; it is recomputed from the match
history on every request.
"""
from typing import Dict, Iterable, List, Optional

from tournament_engine.core.errors import InvalidInput
from tournament_engine.models.bracket_model import MatchModel, MatchStatus
from tournament_engine.models.competition_model import CompetitionCategory, CompetitionModel
from tournament_engine.models.group_model import GroupModel
from tournament_engine.models.leaderboard_model import GroupStanding, LeaderboardModel


def is_scored(match: MatchModel) -> bool:
    return (
        match.status == MatchStatus.COMPLETED
        and match.is_resolved
        and match.score_a is not None
        and match.score_b is not None
    )


def standing_sort_key(standing: GroupStanding):
    # wins desc, points desc, losses asc; anything left keeps input order
    return (-standing.wins, -standing.total_points, standing.losses)


def compute_leaderboard(
    matches: Iterable[MatchModel],
    groups: Optional[Iterable[GroupModel]] = None,
    competitions: Optional[Iterable[CompetitionModel]] = None,
    category: Optional[str] = None,
) -> LeaderboardModel:
    """
    Ranks groups by their completed matches.

    Tied matches count toward matches played and total points but toward
    neither wins nor losses. When `groups` is given every group is listed,
    including those that have not played yet. Restricting to a `category`
    needs the `competitions` the matches belong to.
    """
    if category is not None:
        try:
            category = CompetitionCategory(category)
        except ValueError:
            raise InvalidInput(f"Unknown competition category '{category}'.", field="category")
        if competitions is None:
            raise InvalidInput("Competitions are required to filter by category.", field="competitions")
        allowed_competitions = {c.id for c in competitions if c.category == category}
    else:
        allowed_competitions = None

    standings: Dict[str, GroupStanding] = {}
    for group in groups or []:
        standings[group.id] = GroupStanding(group_id=group.id, group_name=group.name, group_color=group.color)

    for match in matches:
        if not is_scored(match):
            continue
        if allowed_competitions is not None and match.competition_id not in allowed_competitions:
            continue

        for group_id, score in ((match.slot_a, match.score_a), (match.slot_b, match.score_b)):
            standing = standings.get(group_id)
            if standing is None:
                standing = standings[group_id] = GroupStanding(group_id=group_id)
            standing.matches_played += 1
            standing.total_points += score
            if match.winner_id is None:
                continue
            if match.winner_id == group_id:
                standing.wins += 1
            else:
                standing.losses += 1

    ranked: List[GroupStanding] = sorted(standings.values(), key=standing_sort_key)
    for position, standing in enumerate(ranked, start=1):
        standing.rank = position

    return LeaderboardModel(category=category, standings=ranked)
