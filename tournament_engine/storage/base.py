"""
Abstract base class defining the persistence interface used by the service layer.

The engine itself never stores anything; implementations of this interface
own serialization of concurrent writes.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from tournament_engine.models.bracket_model import MatchModel
from tournament_engine.models.competition_model import CompetitionModel
from tournament_engine.models.group_model import GroupModel
from tournament_engine.services.match_service import Propagation


class CompetitionRepository(ABC):
    """
    Storage for groups, competitions and their matches.

    Methods raise NotFound for missing records and Conflict when an
    optimistic update loses a race.
    """

    # =========================================================================
    # GROUPS
    # =========================================================================

    @abstractmethod
    def add_group(self, group: GroupModel) -> GroupModel:
        pass

    @abstractmethod
    def list_groups(self) -> List[GroupModel]:
        pass

    # =========================================================================
    # COMPETITIONS
    # =========================================================================

    @abstractmethod
    def add_competition(self, competition: CompetitionModel) -> CompetitionModel:
        pass

    @abstractmethod
    def get_competition(self, competition_id: str) -> Optional[CompetitionModel]:
        pass

    @abstractmethod
    def list_competitions(self) -> List[CompetitionModel]:
        pass

    @abstractmethod
    def delete_competition(self, competition_id: str) -> bool:
        """
        Delete a competition and, in the same write, all of its matches.

        Returns:
            True if the competition existed
        """
        pass

    # =========================================================================
    # MATCHES
    # =========================================================================

    @abstractmethod
    def get_match(self, match_id: str) -> Optional[MatchModel]:
        pass

    @abstractmethod
    def list_matches(self, competition_id: Optional[str] = None) -> List[MatchModel]:
        pass

    @abstractmethod
    def replace_matches(self, competition_id: str, matches: List[MatchModel]) -> List[MatchModel]:
        """
        Bulk insert a freshly generated bracket.

        Existing matches of the competition are removed in the same write.
        """
        pass

    @abstractmethod
    def update_matches(
        self,
        matches: List[MatchModel],
        expected_versions: Optional[Dict[str, datetime]] = None,
    ) -> List[MatchModel]:
        """
        Atomically update several existing matches.

        Args:
            matches: Updated match records, matched on id
            expected_versions: match id -> updated_at the caller read; a
                mismatch means someone else wrote first

        Returns:
            The stored matches with refreshed updated_at

        Raises:
            NotFound: a match id is unknown
            Conflict: a stored updated_at differs from the expected one
        """
        pass

    @abstractmethod
    def propagate(
        self,
        match: MatchModel,
        expected_updated_at: Optional[datetime] = None,
        propagation: Optional[Propagation] = None,
    ) -> Tuple[MatchModel, Optional[MatchModel]]:
        """
        Store a scored match and write its winner into the downstream slot.

        Only the scored match is version checked. The downstream match is
        read and updated under the same write, so sibling matches finishing
        at the same time each fill their own slot.

        Returns:
            The stored match and the updated downstream match, or None when
            the downstream slot did not change

        Raises:
            NotFound: the match or its downstream match is unknown
            Conflict: the match changed since it was read, or the downstream
                match is no longer Scheduled and its slot would change
        """
        pass

    def update_match(self, match: MatchModel, expected_updated_at: Optional[datetime] = None) -> MatchModel:
        expected = {match.id: expected_updated_at} if expected_updated_at is not None else None
        return self.update_matches([match], expected)[0]
