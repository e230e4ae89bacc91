"""
Scoring event data models for the team point accumulator.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class ScoringEventType(Enum):
    PARTIAL_UPDATE = "partial_update"
    MATCH_COMPLETION = "match_completion"


@dataclass(frozen=True)
class ScoringEvent:
    """Player point deltas produced by one match event.

    ``contest_id`` and ``tournament_id`` narrow the teams the event reaches.

    ``event_key`` must be unique per distinct event; re-delivering the same key
    never changes team totals a second time.
    """
    event_key: str
    match_id: int
    event_type: ScoringEventType
    player_points: Dict[int, float] = field(default_factory=dict)
    contest_id: Optional[int] = None
    tournament_id: Optional[int] = None

    def __post_init__(self):
        if not self.event_key:
            raise ValueError("event_key is required")


@dataclass(frozen=True)
class TeamDelta:
    """Points applied to one fantasy team by one event."""
    team_id: int
    contest_id: int
    points: float
    new_total: float
    duplicate: bool = False
    reversed_points: float = 0.0


@dataclass(frozen=True)
class EventApplication:
    """Result of applying a scoring event."""
    event_key: str
    match_id: int
    deltas: List[TeamDelta]

    @property
    def applied(self) -> List[TeamDelta]:
        return [delta for delta in self.deltas if not delta.duplicate]

    @property
    def duplicates(self) -> List[TeamDelta]:
        return [delta for delta in self.deltas if delta.duplicate]

    @property
    def is_duplicate(self) -> bool:
        """True when every affected team had already seen this event."""
        return bool(self.deltas) and not self.applied
