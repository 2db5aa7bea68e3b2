"""
Match progression: scoring a match and deriving where its winner goes next.

submit_score never touches storage. It returns the updated match together
with a Propagation describing the one downstream slot the caller has to write
(or clear), so propagation can always be re-derived from the current scores.
"""
import logging
from datetime import datetime
from typing import Iterable, List, Optional

from pydantic import BaseModel

from tournament_engine.core.errors import Conflict, InvalidInput, NotFound
from tournament_engine.models.bracket_model import MatchModel, MatchStatus, Slot, SlotRef, utcnow

logger = logging.getLogger(__name__)


class Propagation(BaseModel):
    target: SlotRef
    group_id: Optional[str] = None # None clears the target slot


class ScoreOutcome(BaseModel):
    match: MatchModel
    winner_id: Optional[str] = None
    previous_winner_id: Optional[str] = None
    is_tie: bool = False
    propagation: Optional[Propagation] = None
    notify: bool = False # True once the match is Completed

    @property
    def winner_changed(self) -> bool:
        return self.winner_id != self.previous_winner_id


def determine_winner(match: MatchModel, score_a: int, score_b: int) -> Optional[str]:
    """Returns slot_a's group on a higher score_a, slot_b's on a higher score_b, None on a tie."""
    if score_a > score_b:
        return match.slot_a
    elif score_b > score_a:
        return match.slot_b
    return None


def _validate_score(value, field: str) -> int:
    if value is None:
        raise InvalidInput("Both scores are required.", field=field)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput(f"Score must be an integer, got {value!r}.", field=field)
    if value < 0:
        raise InvalidInput("Scores cannot be negative.", field=field)
    return value


def _resolve_status(status) -> MatchStatus:
    if status is None:
        return MatchStatus.COMPLETED
    try:
        status = MatchStatus(status)
    except ValueError:
        raise InvalidInput(f"Unknown match status '{status}'.", field="status")
    if status == MatchStatus.SCHEDULED:
        raise InvalidInput("A scored match cannot go back to Scheduled.", field="status")
    return status


def submit_score(match: MatchModel, score_a, score_b, status=None, now: Optional[datetime] = None) -> ScoreOutcome:
    """
    Scores a match and computes its new state.

    The input match is left untouched; the returned outcome holds a validated
    copy. Resubmitting a Completed match is allowed and recomputes the winner.
    """
    score_a = _validate_score(score_a, "score_a")
    score_b = _validate_score(score_b, "score_b")
    target_status = _resolve_status(status)

    if match.slot_a is None:
        raise NotFound(f"Match {match.id} has no group in slot A yet.", field="slot_a")
    if match.slot_b is None:
        raise NotFound(f"Match {match.id} has no group in slot B yet.", field="slot_b")

    completed = target_status == MatchStatus.COMPLETED
    winner_id = determine_winner(match, score_a, score_b) if completed else None
    timestamp = now or utcnow()

    update_data = match.model_dump()
    update_data.update(
        score_a=score_a,
        score_b=score_b,
        winner_id=winner_id,
        status=target_status,
        completed_at=timestamp if completed else None,
    )
    updated_match = MatchModel(**update_data)

    propagation = None
    if updated_match.feeds_into is not None:
        propagation = Propagation(target=updated_match.feeds_into, group_id=winner_id)

    is_tie = completed and score_a == score_b
    if is_tie and propagation is not None:
        logger.warning(
            "Match %s (round %d, match %d) ended in a %d-%d tie; downstream slot left unresolved",
            match.id, match.round_number, match.match_number, score_a, score_b,
        )

    return ScoreOutcome(
        match=updated_match,
        winner_id=winner_id,
        previous_winner_id=match.winner_id,
        is_tie=is_tie,
        propagation=propagation,
        notify=completed,
    )


def find_match(matches: Iterable[MatchModel], round_number: int, match_number: int) -> MatchModel:
    for match in matches:
        if match.round_number == round_number and match.match_number == match_number:
            return match
    raise NotFound(f"No match {match_number} in round {round_number}.", field="feeds_into")


def apply_propagation(matches: List[MatchModel], propagation: Propagation) -> Optional[MatchModel]:
    """
    Writes a propagated winner into its fixed downstream slot.

    Returns the updated downstream match, or None when the slot already holds
    the propagated value. Each source only ever writes its own slot, so the
    order in which sibling matches complete does not matter. Changing a slot
    of a match that is already under way raises Conflict.
    """
    target = propagation.target
    downstream = find_match(matches, target.round_number, target.match_number)
    current = downstream.group_in_slot(target.slot)
    if current == propagation.group_id:
        return None

    if downstream.status != MatchStatus.SCHEDULED:
        raise Conflict(
            f"Round {target.round_number} match {target.match_number} is already "
            f"{downstream.status}; its slot {target.slot} cannot change.",
            field="feeds_into",
        )

    update_data = downstream.model_dump()
    if target.slot == Slot.A:
        update_data["slot_a"] = propagation.group_id
    else:
        update_data["slot_b"] = propagation.group_id
    return MatchModel(**update_data)
