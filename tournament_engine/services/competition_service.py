import logging
from typing import List, Optional

from tournament_engine.core.config import settings
from tournament_engine.core.errors import InvalidInput, NotFound
from tournament_engine.models.bracket_model import BracketModel, MatchModel, MatchStatus
from tournament_engine.models.competition_model import (
    BracketDiscipline,
    CompetitionCategory,
    CompetitionModel,
    CompetitionWithMatches,
)
from tournament_engine.models.group_model import GroupModel
from tournament_engine.models.leaderboard_model import LeaderboardModel
from tournament_engine.services import bracket_service, leaderboard_service, match_service
from tournament_engine.services.notification_service import LoggingNotifier, MatchNotifier
from tournament_engine.storage.base import CompetitionRepository

logger = logging.getLogger(__name__)


def summarize_competition(competition: CompetitionModel, matches: List[MatchModel]) -> CompetitionWithMatches:
    """Competition with its matches in bracket order and completion counts."""
    ordered = sorted(matches, key=lambda m: (m.round_number, m.match_number))
    completed = [m for m in ordered if m.status == MatchStatus.COMPLETED]

    champion_id = None
    if competition.bracket_type == BracketDiscipline.SINGLE_ELIMINATION and ordered:
        final = ordered[-1]
        if final.feeds_into is None and final.status == MatchStatus.COMPLETED:
            champion_id = final.winner_id

    return CompetitionWithMatches(
        **competition.model_dump(),
        matches=ordered,
        total_matches=len(ordered),
        completed_matches=len(completed),
        champion_id=champion_id,
    )


class CompetitionService:
    def __init__(self, repository: CompetitionRepository, notifier: Optional[MatchNotifier] = None):
        self.repository = repository
        self.notifier = notifier or LoggingNotifier()

    # --- Groups ---

    def add_group(self, name: str, color: Optional[str] = None) -> GroupModel:
        return self.repository.add_group(GroupModel(name=name, color=color))

    def list_groups(self) -> List[GroupModel]:
        return self.repository.list_groups()

    # --- Competitions ---

    def create_competition(self, name: str, category: str, bracket_type: str) -> CompetitionModel:
        competition = CompetitionModel(name=name, category=category, bracket_type=bracket_type)
        self.repository.add_competition(competition)
        logger.info("Created competition %s (%s, %s)", competition.id, competition.category, competition.bracket_type)
        return competition

    def get_competition(self, competition_id: str) -> CompetitionModel:
        competition = self.repository.get_competition(competition_id)
        if not competition:
            raise NotFound(f"Competition with ID {competition_id} not found.", field="competition_id")
        return competition

    def list_competitions(self, category: Optional[str] = None) -> List[CompetitionModel]:
        competitions = self.repository.list_competitions()
        if category is None:
            return competitions
        try:
            category = CompetitionCategory(category)
        except ValueError:
            raise InvalidInput(f"Unknown competition category '{category}'.", field="category")
        return [c for c in competitions if c.category == category]

    def get_competition_with_matches(self, competition_id: str) -> CompetitionWithMatches:
        competition = self.get_competition(competition_id)
        return summarize_competition(competition, self.repository.list_matches(competition_id))

    def delete_competition(self, competition_id: str) -> None:
        if not self.repository.delete_competition(competition_id):
            raise NotFound(f"Competition with ID {competition_id} not found.", field="competition_id")

    # --- Brackets ---

    def generate_bracket(self, competition_id: str, group_ids: List[str]) -> BracketModel:
        """
        Generates the bracket for a competition, replacing any existing matches.

        Nothing is written unless the whole bracket could be generated.
        """
        competition = self.get_competition(competition_id)

        known_groups = {g.id for g in self.repository.list_groups()}
        unknown = [group_id for group_id in group_ids or [] if group_id not in known_groups]
        if unknown:
            raise NotFound(f"Unknown groups: {', '.join(unknown)}.", field="group_ids")

        bracket = bracket_service.generate_bracket(competition.bracket_type, group_ids, competition.id)
        self.repository.replace_matches(competition.id, bracket.matches)
        return bracket

    # --- Scoring ---

    def submit_score(self, match_id: str, score_a, score_b, status: Optional[str] = None) -> match_service.ScoreOutcome:
        """
        Scores a match and moves its winner into the downstream slot.

        The match is guarded by the updated_at value read here. The downstream
        slot is filled by the repository in the same write, against its
        current state.
        """
        match = self.repository.get_match(match_id)
        if not match:
            raise NotFound(f"Match with ID {match_id} not found.", field="match_id")

        outcome = match_service.submit_score(match, score_a, score_b, status or settings.DEFAULT_SCORE_STATUS)

        written, _downstream = self.repository.propagate(outcome.match, match.updated_at, outcome.propagation)
        outcome = outcome.model_copy(update={"match": written})
        logger.info(
            "Scored match %s %d-%d (%s), winner %s",
            match_id, outcome.match.score_a, outcome.match.score_b, outcome.match.status, outcome.winner_id,
        )

        if outcome.notify:
            self.notifier.match_changed(outcome.match)
        return outcome

    # --- Leaderboard ---

    def leaderboard(self, category: Optional[str] = None) -> LeaderboardModel:
        return leaderboard_service.compute_leaderboard(
            self.repository.list_matches(),
            groups=self.repository.list_groups(),
            competitions=self.repository.list_competitions(),
            category=category,
        )
