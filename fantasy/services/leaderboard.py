"""
Leaderboard service for contest standings.

Ranks all teams of a contest from one snapshot read and caches the ranked
snapshot per contest, so every page served within the cache TTL comes from the
same ordering. Reads never take locks and may lag behind point updates by up to
the TTL.
"""

from typing import Dict, List, Optional, Tuple
import asyncio
import time
import logging

from fantasy.config import Config
from fantasy.constants import PaginationConstants
from fantasy.data_models.leaderboard import LeaderboardEntry, LeaderboardPage
from fantasy.database.models import utcnow
from fantasy.database.repositories import ContestRepository, TeamRepository
from fantasy.services.base import BaseService
from fantasy.utils.ranking import RankingUtility

logger = logging.getLogger(__name__)


class LeaderboardService(BaseService):
    """Service for leaderboard queries and ranking with caching."""

    def __init__(self, session_factory, team_repository: Optional[TeamRepository] = None,
                 contest_repository: Optional[ContestRepository] = None,
                 cache_ttl: Optional[float] = None):
        super().__init__(session_factory)
        self.teams = team_repository or TeamRepository()
        self.contests = contest_repository or ContestRepository()
        # contest_id -> (ranked entries, snapshot time, cached at)
        self._cache: Dict[int, Tuple[List[LeaderboardEntry], object, float]] = {}
        self._cache_ttl = Config.LEADERBOARD_CACHE_TTL if cache_ttl is None else cache_ttl
        self._cache_lock = asyncio.Lock()

    async def invalidate(self, contest_id: Optional[int] = None) -> None:
        """Drop the cached snapshot for one contest, or for all contests."""
        async with self._cache_lock:
            if contest_id is None:
                self._cache.clear()
            else:
                self._cache.pop(contest_id, None)

    async def get_snapshot(self, contest_id: int, refresh: bool = False):
        """Ranked entries for the whole contest plus the time they were read.

        Raises:
            ContestNotFound: Unknown contest
        """
        async with self._cache_lock:
            cached = self._cache.get(contest_id)
            if cached and not refresh and time.monotonic() - cached[2] < self._cache_ttl:
                return cached[0], cached[1]

        async with self.get_session() as session:
            await self.contests.get(session, contest_id)
            teams = await self.teams.list_for_contest(session, contest_id)
            entries = RankingUtility.rank_teams(teams)
            snapshot_at = utcnow()

        async with self._cache_lock:
            self._cache[contest_id] = (entries, snapshot_at, time.monotonic())
        logger.debug(f"Leaderboard snapshot for contest {contest_id}: {len(entries)} teams")
        return entries, snapshot_at

    async def get_leaderboard(self, contest_id: int, page: int = 1,
                              limit: int = PaginationConstants.DEFAULT_PAGE_SIZE) -> LeaderboardPage:
        """Get one page of a contest leaderboard.

        Raises:
            ValueError: Bad page or limit
            ContestNotFound: Unknown contest
        """
        RankingUtility.validate_pagination(page, limit, Config.LEADERBOARD_MAX_PAGE_SIZE)
        entries, snapshot_at = await self.get_snapshot(contest_id)
        return LeaderboardPage(
            contest_id=contest_id,
            entries=RankingUtility.paginate(entries, page, limit),
            current_page=page,
            total_pages=RankingUtility.total_pages(len(entries), limit),
            total_teams=len(entries),
            page_size=limit,
            snapshot_at=snapshot_at,
        )
