import pytest
import uuid
from datetime import datetime, timezone

from tournament_engine.core.errors import Conflict, InvalidInput, NotFound
from tournament_engine.models.bracket_model import MatchModel, MatchStatus, SlotRef
from tournament_engine.services.bracket_service import generate_bracket
from tournament_engine.services.match_service import (
    Propagation,
    apply_propagation,
    determine_winner,
    find_match,
    submit_score,
)

COMPETITION_ID = "competition-1"

def make_match(slot_a="A", slot_b="B", feeds_into=None, **kwargs):
    return MatchModel(
        competition_id=COMPETITION_ID,
        round_number=kwargs.pop("round_number", 1),
        match_number=kwargs.pop("match_number", 1),
        slot_a=slot_a,
        slot_b=slot_b,
        feeds_into=feeds_into,
        **kwargs,
    )

def replace(matches, updated):
    return [updated if m.id == updated.id else m for m in matches]


class TestSubmitScore:

    def test_higher_score_a_wins(self):
        outcome = submit_score(make_match(), 3, 1)

        assert outcome.winner_id == "A"
        assert outcome.match.winner_id == "A"
        assert outcome.match.status == MatchStatus.COMPLETED
        assert (outcome.match.score_a, outcome.match.score_b) == (3, 1)
        assert outcome.match.completed_at is not None
        assert outcome.is_tie is False
        assert outcome.notify is True
        assert outcome.propagation is None # No downstream match

    def test_higher_score_b_wins(self):
        outcome = submit_score(make_match(), 0, 4)
        assert outcome.winner_id == "B"

    def test_equal_scores_complete_without_winner(self):
        outcome = submit_score(make_match(), 2, 2)

        assert outcome.winner_id is None
        assert outcome.match.status == MatchStatus.COMPLETED
        assert outcome.is_tie is True

    def test_zero_zero_is_a_tie(self):
        assert submit_score(make_match(), 0, 0).is_tie is True

    def test_in_progress_records_scores_without_winner(self):
        outcome = submit_score(make_match(), 5, 1, status=MatchStatus.IN_PROGRESS)

        assert outcome.match.status == MatchStatus.IN_PROGRESS
        assert (outcome.match.score_a, outcome.match.score_b) == (5, 1)
        assert outcome.winner_id is None
        assert outcome.match.completed_at is None
        assert outcome.notify is False

    def test_status_accepts_plain_strings(self):
        assert submit_score(make_match(), 1, 0, status="In Progress").match.status == MatchStatus.IN_PROGRESS
        assert submit_score(make_match(), 1, 0, status="Completed").match.status == MatchStatus.COMPLETED

    def test_completion_time_is_stamped(self):
        now = datetime(2026, 3, 14, 15, 9, tzinfo=timezone.utc)
        outcome = submit_score(make_match(), 1, 0, now=now)
        assert outcome.match.completed_at == now

    def test_input_match_is_untouched(self):
        match = make_match()
        submit_score(match, 3, 1)
        assert match.score_a is None
        assert match.winner_id is None
        assert match.status == MatchStatus.SCHEDULED

    def test_resubmission_recomputes_winner(self):
        first = submit_score(make_match(), 3, 1).match
        second = submit_score(first, 1, 6)

        assert second.previous_winner_id == "A"
        assert second.winner_id == "B"
        assert second.winner_changed is True
        assert second.match.id == first.id

    @pytest.mark.parametrize("score_a, score_b, field", [
        (-1, 2, "score_a"),
        (2, -5, "score_b"),
        (None, 2, "score_a"),
        (1, None, "score_b"),
        ("3", 1, "score_a"),
    ])
    def test_invalid_scores(self, score_a, score_b, field):
        with pytest.raises(InvalidInput) as exc_info:
            submit_score(make_match(), score_a, score_b)
        assert exc_info.value.field == field

    @pytest.mark.parametrize("status", ["Scheduled", "Postponed"])
    def test_invalid_target_status(self, status):
        with pytest.raises(InvalidInput) as exc_info:
            submit_score(make_match(), 1, 0, status=status)
        assert exc_info.value.field == "status"

    def test_unresolved_slot_cannot_be_scored(self):
        with pytest.raises(NotFound) as exc_info:
            submit_score(make_match(slot_b=None), 1, 0)
        assert exc_info.value.field == "slot_b"

        with pytest.raises(NotFound) as exc_info:
            submit_score(make_match(slot_a=None, slot_b=None), 1, 0)
        assert exc_info.value.field == "slot_a"

    def test_determine_winner(self):
        match = make_match()
        assert determine_winner(match, 3, 1) == "A"
        assert determine_winner(match, 1, 3) == "B"
        assert determine_winner(match, 2, 2) is None


class TestPropagation:

    def test_winner_propagates_to_fixed_slot(self):
        target = SlotRef(round_number=2, match_number=1, slot="B")
        outcome = submit_score(make_match(feeds_into=target), 2, 7)

        assert outcome.propagation == Propagation(target=target, group_id="B")

    def test_tie_clears_downstream_slot(self):
        target = SlotRef(round_number=2, match_number=1, slot="A")
        outcome = submit_score(make_match(feeds_into=target), 2, 2)

        assert outcome.is_tie is True
        assert outcome.propagation.target == target
        assert outcome.propagation.group_id is None

    def test_apply_fills_final(self):
        matches = generate_bracket("Single Elimination", ["G1", "G2", "G3", "G4"], COMPETITION_ID).matches
        semifinal = find_match(matches, 1, 1)

        outcome = submit_score(semifinal, 3, 1)
        final = apply_propagation(matches, outcome.propagation)

        assert (final.round_number, final.match_number) == (2, 1)
        assert final.slot_a == "G1"
        assert final.slot_b is None

        # Applying the same propagation again changes nothing
        assert apply_propagation(replace(matches, final), outcome.propagation) is None

    def test_completion_order_does_not_matter(self):
        matches = generate_bracket("Single Elimination", ["G1", "G2", "G3", "G4"], COMPETITION_ID).matches
        first = submit_score(find_match(matches, 1, 1), 3, 1)
        second = submit_score(find_match(matches, 1, 2), 0, 2)

        forward = apply_propagation(matches, first.propagation)
        forward = apply_propagation(replace(matches, forward), second.propagation)

        backward = apply_propagation(matches, second.propagation)
        backward = apply_propagation(replace(matches, backward), first.propagation)

        assert (forward.slot_a, forward.slot_b) == ("G1", "G4")
        assert (backward.slot_a, backward.slot_b) == ("G1", "G4")

    def test_changed_winner_overwrites_and_tie_clears(self):
        matches = generate_bracket("Single Elimination", ["G1", "G2", "G3"], COMPETITION_ID).matches
        opener = find_match(matches, 1, 1)

        first = submit_score(opener, 3, 1)
        final = apply_propagation(matches, first.propagation)
        matches = replace(matches, final)
        assert final.slot_a == "G1"
        assert final.slot_b == "G3" # Bye group stays

        flipped = submit_score(first.match, 1, 3)
        final = apply_propagation(matches, flipped.propagation)
        matches = replace(matches, final)
        assert final.slot_a == "G2"

        tied = submit_score(flipped.match, 2, 2)
        final = apply_propagation(matches, tied.propagation)
        assert final.slot_a is None
        assert final.slot_b == "G3"

    def test_played_downstream_match_cannot_change(self):
        target = SlotRef(round_number=2, match_number=1, slot="A")
        downstream = make_match(
            slot_a="G1", slot_b="G3", round_number=2,
            status=MatchStatus.IN_PROGRESS, score_a=0, score_b=0,
        )
        with pytest.raises(Conflict) as exc_info:
            apply_propagation([downstream], Propagation(target=target, group_id="G2"))
        assert exc_info.value.field == "feeds_into"

    def test_missing_downstream_match(self):
        target = SlotRef(round_number=4, match_number=1, slot="A")
        with pytest.raises(NotFound):
            apply_propagation([make_match()], Propagation(target=target, group_id="A"))
