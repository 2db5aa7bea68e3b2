from .bracket_model import (
    BracketFlag,
    BracketModel,
    FlagKind,
    MatchModel,
    MatchStatus,
    Slot,
    SlotRef,
)
from .competition_model import (
    BracketDiscipline,
    CompetitionCategory,
    CompetitionModel,
    CompetitionWithMatches,
)
from .group_model import GroupModel
from .leaderboard_model import GroupStanding, LeaderboardModel
