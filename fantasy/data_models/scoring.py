"""
Scoring data models.

Immutable value objects consumed by the performance scorer and the bonus rules:
the per-contest points table, recorded player performances and the match-feed
record produced by the scoring subsystem.
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Dict, Optional, Tuple

from fantasy.utils.exceptions import InvalidRulesError


# camelCase keys accepted from contest configuration JSON
_POINTS_CONFIG_ALIASES = {
    'matchWin': 'match_win',
    'matchLoss': 'match_loss',
    'setWin': 'set_win',
    'pointWon': 'point_won',
    'pointLost': 'point_lost',
    'winner': 'winner_shot',
    'winnerShot': 'winner_shot',
    'ace': 'ace',
    'error': 'error',
    'fault': 'fault',
    'rallyWon': 'rally_won',
    'tournamentWinner': 'tournament_winner',
    'tournamentRunnerUp': 'tournament_runner_up',
    'tournamentSemiFinal': 'tournament_semi_final',
    'tournamentQuarterFinal': 'tournament_quarter_final',
}


@dataclass(frozen=True)
class PointsConfig:
    """Point value per recorded event. ``point_lost``, ``error`` and ``fault`` are penalties."""
    # Match outcomes
    match_win: float = 10
    match_loss: float = 2
    set_win: float = 5

    # Point scoring
    point_won: float = 0.5
    point_lost: float = -0.2

    # Shot-specific
    winner_shot: float = 2
    ace: float = 3
    error: float = -1
    fault: float = -0.5

    # Rally
    rally_won: float = 1

    # Tournament position bonuses
    tournament_winner: float = 25
    tournament_runner_up: float = 15
    tournament_semi_final: float = 10
    tournament_quarter_final: float = 5

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> 'PointsConfig':
        """Build a config from snake_case or camelCase keys; missing keys keep defaults."""
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            name = _POINTS_CONFIG_ALIASES.get(key, key)
            if name not in known:
                raise InvalidRulesError(f"unknown points config field '{key}'")
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidRulesError(f"points config field '{key}' must be a number")
            values[name] = float(value)
        return cls(**values)

    def to_dict(self) -> Dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


DEFAULT_POINTS_CONFIG = PointsConfig()


@dataclass(frozen=True)
class MatchPerformance:
    """One player's recorded stats for one match."""
    player_id: int
    match_id: Optional[int] = None
    winners: int = 0
    errors: int = 0
    aces: int = 0
    faults: int = 0
    rallies_won: int = 0
    is_set_winner: Tuple[bool, ...] = ()
    points_scored: int = 0
    points_conceded: int = 0
    is_match_winner: bool = False
    time_on_court: int = 0  # minutes

    def __post_init__(self):
        # Accept any iterable of flags but keep the instance hashable/immutable
        object.__setattr__(self, 'is_set_winner', tuple(bool(x) for x in self.is_set_winner))

    @property
    def sets_won(self) -> int:
        return sum(1 for won in self.is_set_winner if won)


@dataclass(frozen=True)
class TournamentPerformance:
    """A player's match performances across one tournament."""
    player_id: int
    tournament_id: Optional[int] = None
    matches: Tuple[MatchPerformance, ...] = ()
    tournament_position: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, 'matches', tuple(self.matches))


class MatchStatus(Enum):
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


@dataclass(frozen=True)
class MatchOutcome:
    """Match-feed record for a two-sided match."""
    match_id: int
    round: str
    player1_id: int
    player2_id: int
    player1_score: int = 0
    player2_score: int = 0
    status: MatchStatus = MatchStatus.COMPLETED

    @property
    def is_completed(self) -> bool:
        return self.status == MatchStatus.COMPLETED


@dataclass(frozen=True)
class PlayerMatchPoints:
    """Per-player match points before role multipliers."""
    player_id: int
    base_points: float
    bonuses: Dict[str, float] = field(default_factory=dict)
    knockout_multiplier: float = 1.0
    total_points: float = 0.0

    @property
    def bonus_total(self) -> float:
        return sum(self.bonuses.values())


@dataclass(frozen=True)
class PerformanceSummary:
    """Display summary of a player's tournament."""
    player_id: int
    total_points: float
    matches_played: int
    matches_won: int
    sets_won: int
    win_rate: float
    best_match_id: Optional[int] = None
    best_match_points: Optional[float] = None
