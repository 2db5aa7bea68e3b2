import json
import logging
import os
import threading
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from tournament_engine.core.errors import Conflict, NotFound
from tournament_engine.models.bracket_model import MatchModel, utcnow
from tournament_engine.models.competition_model import CompetitionModel
from tournament_engine.models.group_model import GroupModel
from tournament_engine.services.match_service import Propagation, apply_propagation
from tournament_engine.storage.base import CompetitionRepository

logger = logging.getLogger(__name__)

GROUPS_FILE = "groups.json"
COMPETITIONS_FILE = "competitions.json"
MATCHES_FILE = "matches.json"


class JsonCompetitionRepository(CompetitionRepository):
    def __init__(self, data_dir: str):
        self.data_dir = data_dir
        self.groups_file_path = os.path.join(data_dir, GROUPS_FILE)
        self.competitions_file_path = os.path.join(data_dir, COMPETITIONS_FILE)
        self.matches_file_path = os.path.join(data_dir, MATCHES_FILE)
        # Serializes every read-modify-write against the files
        self._lock = threading.RLock()

        os.makedirs(self.data_dir, exist_ok=True)
        for path in (self.groups_file_path, self.competitions_file_path, self.matches_file_path):
            if not os.path.exists(path):
                self._save_to_file(path, [])

    def _load_from_file(self, path: str) -> List[Dict[str, Any]]:
        if not os.path.exists(path):
            return []
        try:
            with open(path, "r") as f:
                return json.load(f)
        except json.JSONDecodeError:
            logger.warning("Could not decode %s, treating it as empty", path)
            return []

    def _save_to_file(self, path: str, records: List[Dict[str, Any]]):
        tmp_path = f"{path}.tmp"
        with open(tmp_path, "w") as f:
            json.dump(records, f, indent=4)
        os.replace(tmp_path, path)

    def _load_matches(self) -> List[MatchModel]:
        return [MatchModel(**m) for m in self._load_from_file(self.matches_file_path)]

    def _save_matches(self, matches: List[MatchModel]):
        self._save_to_file(self.matches_file_path, [m.model_dump(mode="json") for m in matches])

    # --- Groups ---

    def add_group(self, group: GroupModel) -> GroupModel:
        with self._lock:
            groups = self._load_from_file(self.groups_file_path)
            groups = [g for g in groups if g.get("id") != group.id]
            groups.append(group.model_dump(mode="json"))
            self._save_to_file(self.groups_file_path, groups)
        return group

    def list_groups(self) -> List[GroupModel]:
        return [GroupModel(**g) for g in self._load_from_file(self.groups_file_path)]

    # --- Competitions ---

    def add_competition(self, competition: CompetitionModel) -> CompetitionModel:
        with self._lock:
            competitions = self._load_from_file(self.competitions_file_path)
            competitions.append(competition.model_dump(mode="json"))
            self._save_to_file(self.competitions_file_path, competitions)
        return competition

    def get_competition(self, competition_id: str) -> Optional[CompetitionModel]:
        for competition_dict in self._load_from_file(self.competitions_file_path):
            if competition_dict.get("id") == competition_id:
                return CompetitionModel(**competition_dict)
        return None

    def list_competitions(self) -> List[CompetitionModel]:
        return [CompetitionModel(**c) for c in self._load_from_file(self.competitions_file_path)]

    def delete_competition(self, competition_id: str) -> bool:
        with self._lock:
            competitions = self._load_from_file(self.competitions_file_path)
            remaining = [c for c in competitions if c.get("id") != competition_id]
            if len(remaining) == len(competitions):
                return False
            matches = [m for m in self._load_from_file(self.matches_file_path) if m.get("competition_id") != competition_id]
            # Matches first so a crash never leaves orphans behind a deleted competition
            self._save_to_file(self.matches_file_path, matches)
            self._save_to_file(self.competitions_file_path, remaining)
        logger.info("Deleted competition %s and its matches", competition_id)
        return True

    # --- Matches ---

    def get_match(self, match_id: str) -> Optional[MatchModel]:
        for match_dict in self._load_from_file(self.matches_file_path):
            if match_dict.get("id") == match_id:
                return MatchModel(**match_dict)
        return None

    def list_matches(self, competition_id: Optional[str] = None) -> List[MatchModel]:
        matches = self._load_matches()
        if competition_id is not None:
            matches = [m for m in matches if m.competition_id == competition_id]
        return sorted(matches, key=lambda m: (m.competition_id, m.round_number, m.match_number))

    def replace_matches(self, competition_id: str, matches: List[MatchModel]) -> List[MatchModel]:
        with self._lock:
            stored = [m for m in self._load_matches() if m.competition_id != competition_id]
            stored.extend(matches)
            self._save_matches(stored)
        logger.info("Stored %d matches for competition %s", len(matches), competition_id)
        return matches

    def _check_version(self, stored: List[MatchModel], index_by_id: Dict[str, int], match_id: str, expected):
        if match_id not in index_by_id:
            raise NotFound(f"Match with ID {match_id} not found.", field="match_id")
        if expected is not None and stored[index_by_id[match_id]].updated_at != expected:
            raise Conflict(f"Match {match_id} was modified by another request.", field="match_id")

    def _write_matches(
        self,
        stored: List[MatchModel],
        index_by_id: Dict[str, int],
        matches: List[MatchModel],
    ) -> List[MatchModel]:
        now = utcnow()
        written: List[MatchModel] = []
        for match in matches:
            refreshed = match.model_copy(update={"updated_at": now})
            stored[index_by_id[match.id]] = refreshed
            written.append(refreshed)
        self._save_matches(stored)
        return written

    def update_matches(
        self,
        matches: List[MatchModel],
        expected_versions: Optional[Dict[str, datetime]] = None,
    ) -> List[MatchModel]:
        expected_versions = expected_versions or {}
        with self._lock:
            stored = self._load_matches()
            index_by_id = {m.id: i for i, m in enumerate(stored)}
            for match in matches:
                self._check_version(stored, index_by_id, match.id, expected_versions.get(match.id))
            return self._write_matches(stored, index_by_id, matches)

    def propagate(
        self,
        match: MatchModel,
        expected_updated_at: Optional[datetime] = None,
        propagation: Optional[Propagation] = None,
    ) -> Tuple[MatchModel, Optional[MatchModel]]:
        with self._lock:
            stored = self._load_matches()
            index_by_id = {m.id: i for i, m in enumerate(stored)}
            self._check_version(stored, index_by_id, match.id, expected_updated_at)

            to_write = [match]
            if propagation is not None:
                # Fresh read: a sibling may have filled the other slot since the caller loaded anything
                siblings = [m for m in stored if m.competition_id == match.competition_id]
                downstream = apply_propagation(siblings, propagation)
                if downstream is not None:
                    to_write.append(downstream)

            written = self._write_matches(stored, index_by_id, to_write)
        return written[0], (written[1] if len(written) > 1 else None)
