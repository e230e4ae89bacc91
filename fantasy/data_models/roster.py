"""
Roster and contest-rule data models.

``ContestRules`` replaces the free-form rules blob stored on a contest with
named, typed fields. Unknown keys are carried in ``extras`` and never read.
"""

import json
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from fantasy.config import Config
from fantasy.utils.exceptions import InvalidRulesError

RULES_VERSION = 1

_TIME_PATTERN = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')


class ChangeFrequency(Enum):
    DAILY = "daily"
    MATCHDAY = "matchday"
    ONCE = "once"


# JSON key -> attribute name
_RULE_KEYS = {
    'version': 'version',
    'teamSize': 'team_size',
    'fantasyTeamSize': 'team_size',
    'walletSize': 'wallet_size',
    'allowTeamChanges': 'allow_team_changes',
    'changeFrequency': 'change_frequency',
    'maxPlayersToChange': 'max_players_to_change',
    'changeWindowStart': 'change_window_start',
    'changeWindowEnd': 'change_window_end',
}


@dataclass(frozen=True)
class ContestRules:
    """Typed contest rule set.

    Defaults:
        team_size: Config.DEFAULT_TEAM_SIZE (7)
        wallet_size: Config.DEFAULT_WALLET_SIZE (100000)
        allow_team_changes: False
        change_frequency: Config.DEFAULT_CHANGE_FREQUENCY ("daily")
        max_players_to_change: Config.DEFAULT_MAX_PLAYERS_TO_CHANGE (2)
        change_window_start / change_window_end: None (no daily window)
    """
    team_size: int = field(default_factory=lambda: Config.DEFAULT_TEAM_SIZE)
    wallet_size: float = field(default_factory=lambda: Config.DEFAULT_WALLET_SIZE)
    allow_team_changes: bool = False
    change_frequency: ChangeFrequency = field(
        default_factory=lambda: ChangeFrequency(Config.DEFAULT_CHANGE_FREQUENCY)
    )
    max_players_to_change: int = field(default_factory=lambda: Config.DEFAULT_MAX_PLAYERS_TO_CHANGE)
    change_window_start: Optional[str] = None
    change_window_end: Optional[str] = None
    version: int = RULES_VERSION
    extras: Dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        if self.team_size < 2:
            raise InvalidRulesError("teamSize must be at least 2")
        if self.wallet_size < 0:
            raise InvalidRulesError("walletSize cannot be negative")
        if self.max_players_to_change < 1:
            raise InvalidRulesError("maxPlayersToChange must be at least 1")
        for value in (self.change_window_start, self.change_window_end):
            if value is not None and not _TIME_PATTERN.match(value):
                raise InvalidRulesError(f"change window time '{value}' must be HH:MM")
        if (self.change_window_start is None) != (self.change_window_end is None):
            raise InvalidRulesError("changeWindowStart and changeWindowEnd must be set together")

    @property
    def has_change_window(self) -> bool:
        return self.change_window_start is not None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'ContestRules':
        """Parse the JSON-shaped rules blob."""
        if not data:
            return cls()
        if not isinstance(data, dict):
            raise InvalidRulesError("rules must be a JSON object")

        values: Dict[str, Any] = {}
        extras: Dict[str, Any] = {}
        for key, value in data.items():
            name = _RULE_KEYS.get(key)
            if name is None:
                extras[key] = value
            else:
                values[name] = value

        version = values.get('version', RULES_VERSION)
        if not isinstance(version, int) or isinstance(version, bool):
            raise InvalidRulesError(f"rules version must be an integer, got {version!r}")
        if version > RULES_VERSION:
            raise InvalidRulesError(f"unsupported rules version {values['version']}")

        try:
            if 'team_size' in values:
                values['team_size'] = int(values['team_size'])
            if 'wallet_size' in values:
                values['wallet_size'] = float(values['wallet_size'])
            if 'max_players_to_change' in values:
                values['max_players_to_change'] = int(values['max_players_to_change'])
            if 'change_frequency' in values:
                values['change_frequency'] = ChangeFrequency(str(values['change_frequency']).lower())
        except (TypeError, ValueError) as e:
            raise InvalidRulesError(str(e)) from e
        if 'allow_team_changes' in values and not isinstance(values['allow_team_changes'], bool):
            raise InvalidRulesError(
                f"allowTeamChanges must be true or false, got {values['allow_team_changes']!r}"
            )

        return cls(extras=extras, **values)

    @classmethod
    def from_json(cls, raw: Optional[str]) -> 'ContestRules':
        if not raw:
            return cls()
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise InvalidRulesError(f"rules are not valid JSON: {e}") from e
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extras)
        data.update({
            'version': self.version,
            'teamSize': self.team_size,
            'walletSize': self.wallet_size,
            'allowTeamChanges': self.allow_team_changes,
            'changeFrequency': self.change_frequency.value,
            'maxPlayersToChange': self.max_players_to_change,
        })
        if self.has_change_window:
            data['changeWindowStart'] = self.change_window_start
            data['changeWindowEnd'] = self.change_window_end
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


@dataclass(frozen=True)
class RosterSelection:
    """One proposed roster pick."""
    player_id: int
    is_captain: bool = False
    is_vice_captain: bool = False


@dataclass(frozen=True)
class Roster:
    """A roster that passed validation."""
    slots: Tuple[RosterSelection, ...]
    budget_spent: float

    @property
    def player_ids(self) -> Tuple[int, ...]:
        return tuple(slot.player_id for slot in self.slots)

    @property
    def captain_id(self) -> int:
        return next(slot.player_id for slot in self.slots if slot.is_captain)

    @property
    def vice_captain_id(self) -> int:
        return next(slot.player_id for slot in self.slots if slot.is_vice_captain)


@dataclass(frozen=True)
class EditContext:
    """Tournament timing and a team's edit history, as needed by the edit policy."""
    tournament_start: datetime
    tournament_end: datetime
    last_edited_at: Optional[datetime] = None
    edit_count_since_start: int = 0
    current_matchday: Optional[int] = None
    last_edit_matchday: Optional[int] = None

    def last_edit_day(self) -> Optional[date]:
        return self.last_edited_at.date() if self.last_edited_at else None


@dataclass(frozen=True)
class PlayerOwnership:
    """How often a player was picked across a contest's rosters."""
    player_id: int
    selected_by: int
    captained_by: int
    vice_captained_by: int
    selection_percentage: float
    captain_percentage: float
