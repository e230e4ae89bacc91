"""
Contest settlement: prize breakdowns and payout instructions.

Settlement ranks the final team totals, maps the tiered prize split onto the
ranked teams and marks the contest COMPLETED. Moving money is left to the
caller; this service only produces the payout instructions.
"""

import logging
from typing import Optional

from fantasy.data_models.prizes import Payout, PrizeBreakdown, SettlementResult
from fantasy.database.models import Contest, ContestStatus
from fantasy.database.repositories import ContestRepository, TeamRepository
from fantasy.services.base import BaseService
from fantasy.utils.exceptions import ContestStateError
from fantasy.utils.prizes import calculate_prize_pool, get_prize_breakdown
from fantasy.utils.ranking import RankingUtility

logger = logging.getLogger(__name__)


class SettlementService(BaseService):
    """Prize distribution for finished contests."""

    def __init__(self, session_factory, team_repository: Optional[TeamRepository] = None,
                 contest_repository: Optional[ContestRepository] = None,
                 leaderboard_service=None):
        super().__init__(session_factory)
        self.teams = team_repository or TeamRepository()
        self.contests = contest_repository or ContestRepository()
        self.leaderboard_service = leaderboard_service  # Optional, cache is dropped on settle

    @staticmethod
    def get_prize_breakdown(prize_pool: float, participant_count: int) -> PrizeBreakdown:
        return get_prize_breakdown(prize_pool, participant_count)

    @staticmethod
    def resolve_prize_pool(contest: Contest, participant_count: int) -> float:
        """Fixed prize pool if the contest has one, otherwise the share of collected fees."""
        if contest.prize_pool:
            return contest.prize_pool
        return calculate_prize_pool(contest.entry_fee or 0, participant_count)

    @staticmethod
    def _breakdown(contest: Contest, participant_count: int) -> PrizeBreakdown:
        prize_pool = SettlementService.resolve_prize_pool(contest, participant_count)
        if participant_count == 0:
            return PrizeBreakdown(prize_pool=prize_pool, participant_count=0, entries=[])
        return get_prize_breakdown(prize_pool, participant_count)

    async def get_contest_breakdown(self, contest_id: int) -> PrizeBreakdown:
        """Prize breakdown for a contest at its current entry count.

        Raises:
            ContestNotFound: Unknown contest
        """
        async with self.get_session() as session:
            contest = await self.contests.get(session, contest_id)
            participant_count = await self.teams.count_for_contest(session, contest_id)
            return self._breakdown(contest, participant_count)

    async def settle_contest(self, contest_id: int) -> SettlementResult:
        """
        Settle a contest and produce its payout instructions.

        Returns:
            SettlementResult with one Payout per paid team, in rank order

        Raises:
            ContestNotFound: Unknown contest
            ContestStateError: Contest already completed or cancelled
        """
        async with self.get_session() as session:
            contest = await self.contests.get_for_update(session, contest_id)
            if contest.status.is_final:
                raise ContestStateError(contest_id, contest.status.value, "settle")

            teams = await self.teams.list_for_contest(session, contest_id)
            ranked = RankingUtility.rank_teams(teams)
            breakdown = self._breakdown(contest, len(ranked))

            payouts = []
            for entry in ranked:
                prize = breakdown.for_position(entry.rank)
                if prize is None:
                    break
                payouts.append(Payout(
                    team_id=entry.team_id,
                    owner_id=entry.owner_id,
                    rank=entry.rank,
                    total_points=entry.total_points,
                    percentage=prize.percentage,
                    amount=prize.amount,
                ))

            contest.prize_pool = breakdown.prize_pool
            await self.contests.set_status(session, contest, ContestStatus.COMPLETED)

        if self.leaderboard_service is not None:
            await self.leaderboard_service.invalidate(contest_id)

        result = SettlementResult(
            contest_id=contest_id,
            prize_pool=breakdown.prize_pool,
            participant_count=len(ranked),
            payouts=payouts,
        )
        logger.info(
            f"Contest {contest_id} settled: {len(payouts)} payouts, "
            f"{result.total_paid:g} of {breakdown.prize_pool:g}"
        )
        return result
