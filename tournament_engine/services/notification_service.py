import logging
from abc import ABC, abstractmethod

from tournament_engine.models.bracket_model import MatchModel

logger = logging.getLogger(__name__)


class MatchNotifier(ABC):
    """Informed after a match is Completed so viewers can refresh."""

    @abstractmethod
    def match_changed(self, match: MatchModel) -> None:
        pass


class LoggingNotifier(MatchNotifier):
    def match_changed(self, match: MatchModel) -> None:
        logger.info(
            "Match %s (competition %s, round %d, match %d) is now %s: %s %s - %s %s",
            match.id, match.competition_id, match.round_number, match.match_number, match.status,
            match.slot_a, match.score_a, match.score_b, match.slot_b,
        )
