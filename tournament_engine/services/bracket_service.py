"""
Bracket generation for single elimination and round robin competitions.

Everything here is a pure function of (discipline, ordered group ids): the
same input always yields the same round/match numbering, slot assignments and
forward links, so a bracket can be regenerated by deleting and recreating it.
"""
import logging
import math
from typing import List, Optional, Dict, Tuple

from tournament_engine.core.errors import InvalidInput, Unsupported
from tournament_engine.models.bracket_model import (
    BracketFlag,
    BracketModel,
    FlagKind,
    MatchModel,
    MatchStatus,
    Slot,
    SlotRef,
)
from tournament_engine.models.competition_model import BracketDiscipline

logger = logging.getLogger(__name__)


def get_round_name(matches_in_round: int) -> str:
    """Get the name of a round based on the number of matches it holds."""
    groups_in_round = matches_in_round * 2
    if groups_in_round == 2:
        return "Final"
    elif groups_in_round == 4:
        return "Semifinal"
    elif groups_in_round == 8:
        return "Quarterfinal"
    return f"Round of {groups_in_round}"


def calculate_bracket_size(num_groups: int) -> int:
    """Calculate the bracket size (next power of 2)."""
    if num_groups <= 0:
        return 0
    return 2 ** math.ceil(math.log2(num_groups))


def calculate_byes(num_groups: int) -> int:
    """Calculate number of byes needed."""
    return calculate_bracket_size(num_groups) - num_groups


def count_rounds(num_groups: int) -> int:
    """Number of single elimination rounds, the final included."""
    bracket_size = calculate_bracket_size(num_groups)
    if bracket_size < 2:
        return 0
    return int(math.log2(bracket_size))


def expected_match_count(discipline: str, num_groups: int) -> int:
    """Number of match records generate_bracket creates for num_groups groups."""
    if discipline == BracketDiscipline.ROUND_ROBIN:
        return num_groups * (num_groups - 1) // 2
    if discipline == BracketDiscipline.SINGLE_ELIMINATION:
        first_round = (num_groups - calculate_byes(num_groups)) // 2
        # Every later round r holds bracket_size / 2^r matches
        bracket_size = calculate_bracket_size(num_groups)
        later_rounds = sum(bracket_size // 2 ** r for r in range(2, count_rounds(num_groups) + 1))
        return first_round + later_rounds
    raise Unsupported(f"Bracket generation for {discipline} is not implemented.", field="bracket_type")


def _validate_group_ids(group_ids: List[str]) -> None:
    if group_ids is None or len(group_ids) < 2:
        raise InvalidInput("A bracket requires at least 2 groups.", field="group_ids")
    if any(not group_id for group_id in group_ids):
        raise InvalidInput("Group ids cannot be empty.", field="group_ids")
    seen = set()
    for group_id in group_ids:
        if group_id in seen:
            raise InvalidInput(f"Group {group_id} appears more than once in the seed list.", field="group_ids")
        seen.add(group_id)


def _link(source: MatchModel, round_number: int, match_number: int, slot: Slot) -> None:
    source.feeds_into = SlotRef(round_number=round_number, match_number=match_number, slot=slot)


def generate_round_robin(group_ids: List[str], competition_id: str) -> List[MatchModel]:
    """One round-1 match per unordered pair, numbered in lexicographic pair order."""
    matches: List[MatchModel] = []
    match_number = 1
    for i in range(len(group_ids)):
        for j in range(i + 1, len(group_ids)):
            matches.append(MatchModel(
                competition_id=competition_id,
                round_number=1,
                match_number=match_number,
                slot_a=group_ids[i],
                slot_b=group_ids[j],
                status=MatchStatus.SCHEDULED,
            ))
            match_number += 1
    return matches


def generate_single_elimination(group_ids: List[str], competition_id: str) -> Tuple[List[MatchModel], List[BracketFlag]]:
    """
    Generates every match of a single elimination bracket.

    Seeds 2k-1 and 2k meet in round 1 match k. The tail of the seed list gets
    byes into round 2, where round-1 winners and bye groups are interleaved
    (W1, bye1, W2, bye2, ...) and paired off in order. Rounds after the second
    are empty placeholders. Each non-final match records the slot its winner
    fills in `feeds_into`.

    Returns the matches and the flags an administrator has to look at.
    """
    num_groups = len(group_ids)
    bracket_size = calculate_bracket_size(num_groups)
    num_byes = bracket_size - num_groups
    num_first_round_matches = (num_groups - num_byes) // 2
    num_rounds = count_rounds(num_groups)

    all_matches: List[MatchModel] = []
    flags: List[BracketFlag] = []

    # --- Round 1: seeds paired in order ---
    round1_matches: List[MatchModel] = []
    for k in range(num_first_round_matches):
        match = MatchModel(
            competition_id=competition_id,
            round_number=1,
            match_number=k + 1,
            slot_a=group_ids[2 * k],
            slot_b=group_ids[2 * k + 1],
            status=MatchStatus.SCHEDULED,
        )
        round1_matches.append(match)
    all_matches.extend(round1_matches)

    if num_rounds < 2:
        return all_matches, flags

    # --- Round 2: round-1 winners interleaved with bye groups ---
    bye_groups = group_ids[2 * num_first_round_matches:]
    # Each entrant is either (source match, None) or (None, bye group id)
    entrants: List[Tuple[Optional[MatchModel], Optional[str]]] = []
    for i in range(max(num_first_round_matches, num_byes)):
        if i < num_first_round_matches:
            entrants.append((round1_matches[i], None))
        if i < num_byes:
            entrants.append((None, bye_groups[i]))

    previous_round: List[MatchModel] = []
    for j in range(len(entrants) // 2):
        new_match = MatchModel(
            competition_id=competition_id,
            round_number=2,
            match_number=j + 1,
            status=MatchStatus.SCHEDULED,
        )
        for (source, bye_group), slot in zip(entrants[2 * j:2 * j + 2], (Slot.A, Slot.B)):
            if source is not None:
                _link(source, 2, new_match.match_number, slot)
            elif slot == Slot.A:
                new_match.slot_a = bye_group
            else:
                new_match.slot_b = bye_group

        if new_match.is_resolved:
            # Both entrants skipped round 1; left for an administrator to adjudicate
            flags.append(BracketFlag(
                kind=FlagKind.BYE_VS_BYE,
                round_number=2,
                match_number=new_match.match_number,
                group_ids=[new_match.slot_a, new_match.slot_b],
                message=(
                    f"Round 2 match {new_match.match_number} pairs two bye groups "
                    f"({new_match.slot_a} vs {new_match.slot_b}) and was not auto-completed."
                ),
            ))
        previous_round.append(new_match)
    all_matches.extend(previous_round)

    # --- Rounds 3..final: placeholders, match k feeds ceil(k/2) ---
    for round_number in range(3, num_rounds + 1):
        current_round: List[MatchModel] = []
        for match_number in range(1, bracket_size // 2 ** round_number + 1):
            current_round.append(MatchModel(
                competition_id=competition_id,
                round_number=round_number,
                match_number=match_number,
                status=MatchStatus.SCHEDULED,
            ))
        for source in previous_round:
            k = source.match_number
            _link(source, round_number, (k + 1) // 2, Slot.A if k % 2 == 1 else Slot.B)
        all_matches.extend(current_round)
        previous_round = current_round

    return all_matches, flags


def build_rounds_structure(matches: List[MatchModel]) -> Dict[int, List[str]]:
    rounds_structure: Dict[int, List[str]] = {}
    for match in sorted(matches, key=lambda m: (m.round_number, m.match_number)):
        rounds_structure.setdefault(match.round_number, []).append(match.id)
    return rounds_structure


def build_round_names(num_groups: int) -> Dict[int, str]:
    """Labels single elimination rounds by the full bracket size, so a round with byes keeps its name."""
    bracket_size = calculate_bracket_size(num_groups)
    return {
        round_number: get_round_name(bracket_size >> round_number)
        for round_number in range(1, count_rounds(num_groups) + 1)
    }


def generate_bracket(discipline: str, group_ids: List[str], competition_id: str) -> BracketModel:
    """
    Creates the complete initial match set for a competition.

    Raises InvalidInput for fewer than two groups or duplicate groups, and
    Unsupported for Double Elimination or an unknown discipline.
    """
    try:
        discipline = BracketDiscipline(discipline)
    except ValueError:
        raise Unsupported(f"Unknown bracket discipline '{discipline}'.", field="bracket_type")

    _validate_group_ids(group_ids)
    group_ids = list(group_ids)

    flags: List[BracketFlag] = []
    round_names: Dict[int, str] = {}
    if discipline == BracketDiscipline.SINGLE_ELIMINATION:
        matches, flags = generate_single_elimination(group_ids, competition_id)
        round_names = build_round_names(len(group_ids))
    elif discipline == BracketDiscipline.ROUND_ROBIN:
        matches = generate_round_robin(group_ids, competition_id)
    else:
        raise Unsupported(f"Bracket generation for {discipline.value} is not implemented.", field="bracket_type")

    bracket = BracketModel(
        competition_id=competition_id,
        bracket_type=discipline.value,
        matches=matches,
        rounds_structure=build_rounds_structure(matches),
        round_names=round_names,
        flags=flags,
    )
    logger.info(
        "Generated %s bracket for competition %s: %d groups, %d matches, %d rounds",
        discipline.value, competition_id, len(group_ids), len(matches), bracket.total_rounds,
    )
    for flag in flags:
        logger.warning(flag.message)
    return bracket
