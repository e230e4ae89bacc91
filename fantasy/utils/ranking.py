"""
Shared ranking utilities for contest leaderboards.

Teams are ordered by total points (descending). Ties are broken by team
creation time and then team id, so every team gets its own positional rank
and prize assignment always sees a total order.
"""

from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from fantasy.data_models.leaderboard import LeaderboardEntry


class RankingUtility:
    """Deterministic positional ranking for fantasy teams."""

    @staticmethod
    def sort_key(total_points: float, created_at: Optional[datetime], team_id: int) -> Tuple:
        # Teams without a creation time sort after dated ones among equals
        created_marker = (0, created_at) if created_at is not None else (1, datetime.max)
        return (-(total_points or 0.0), created_marker, team_id)

    @staticmethod
    def rank_teams(teams: Iterable) -> List[LeaderboardEntry]:
        """
        Rank team records into leaderboard entries.

        Args:
            teams: Objects exposing id, name, owner_id, total_points, created_at

        Returns:
            Entries with ranks 1..N in leaderboard order
        """
        ordered = sorted(
            teams,
            key=lambda team: RankingUtility.sort_key(team.total_points, team.created_at, team.id),
        )
        return [
            LeaderboardEntry(
                rank=position,
                team_id=team.id,
                team_name=team.name,
                owner_id=team.owner_id,
                total_points=team.total_points or 0.0,
            )
            for position, team in enumerate(ordered, start=1)
        ]

    @staticmethod
    def paginate(entries: Sequence[LeaderboardEntry], page: int, page_size: int) -> List[LeaderboardEntry]:
        offset = (page - 1) * page_size
        return list(entries[offset:offset + page_size])

    @staticmethod
    def total_pages(total: int, page_size: int) -> int:
        return (total + page_size - 1) // page_size if total > 0 else 1

    @staticmethod
    def validate_pagination(page: int, page_size: int, max_page_size: int) -> None:
        """Validate page parameters."""
        if not isinstance(page, int) or page < 1:
            raise ValueError("page must be a positive integer")
        if not isinstance(page_size, int) or page_size < 1 or page_size > max_page_size:
            raise ValueError(f"page_size must be between 1 and {max_page_size}")
