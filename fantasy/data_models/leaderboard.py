"""
Leaderboard data models.

Immutable data transfer objects derived at read time from team totals.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class LeaderboardEntry:
    """Single leaderboard row."""
    rank: int
    team_id: int
    team_name: str
    owner_id: int
    total_points: float


@dataclass(frozen=True)
class LeaderboardPage:
    """Paginated leaderboard data."""
    contest_id: int
    entries: List[LeaderboardEntry]
    current_page: int
    total_pages: int
    total_teams: int
    page_size: int
    snapshot_at: Optional[datetime] = None
