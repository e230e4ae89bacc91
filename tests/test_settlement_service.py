"""
Tests for contest settlement and payout instructions.
"""

from datetime import datetime

import pytest

from fantasy.database.models import Contest, ContestStatus
from fantasy.services.leaderboard import LeaderboardService
from fantasy.services.settlement import SettlementService
from fantasy.utils.exceptions import ContestNotFound, ContestStateError


@pytest.fixture
def settlement(session_factory):
    return SettlementService(session_factory, leaderboard_service=LeaderboardService(session_factory))


async def add_teams(make_team, contest_id, totals):
    team_ids = []
    for offset, total in enumerate(totals):
        team_ids.append(await make_team(
            contest_id, [(1, "C"), (2, "VC")], total_points=total,
            created_at=datetime(2026, 4, 1, 12, offset), owner_id=500 + offset,
        ))
    return team_ids


class TestSettleContest:
    async def test_small_contest_pays_winner(self, settlement, database, make_contest, make_team):
        contest_id = await make_contest(prize_pool=10000.0)
        team_ids = await add_teams(make_team, contest_id, [12.0, 40.0, 25.0])

        result = await settlement.settle_contest(contest_id)

        assert result.participant_count == 3
        assert len(result.payouts) == 1
        payout = result.payouts[0]
        assert (payout.team_id, payout.owner_id, payout.rank) == (team_ids[1], 501, 1)
        assert (payout.percentage, payout.amount) == (70.0, 7000.0)
        assert result.total_paid == 7000.0

        async with database.get_session() as session:
            contest = await session.get(Contest, contest_id)
            assert contest.status == ContestStatus.COMPLETED
            assert contest.completed_at is not None

    async def test_podium_payouts_in_rank_order(self, settlement, make_contest, make_team):
        contest_id = await make_contest(prize_pool=10000.0)
        team_ids = await add_teams(make_team, contest_id, [5.0, 60.0, 45.0, 45.0, 10.0, 80.0])

        result = await settlement.settle_contest(contest_id)

        assert [p.team_id for p in result.payouts] == [team_ids[5], team_ids[1], team_ids[2]]
        assert [p.amount for p in result.payouts] == [4000.0, 2400.0, 1600.0]

    async def test_dynamic_prize_pool_from_entry_fees(self, settlement, make_contest, make_team):
        contest_id = await make_contest(prize_pool=0.0, entry_fee=100.0)
        await add_teams(make_team, contest_id, [float(i) for i in range(10)])

        breakdown = await settlement.get_contest_breakdown(contest_id)
        assert breakdown.prize_pool == pytest.approx(776.4)
        assert breakdown.paid_positions == 3

        result = await settlement.settle_contest(contest_id)
        assert result.prize_pool == pytest.approx(776.4)
        assert result.payouts[0].amount == pytest.approx(776.4 * 0.4)

    async def test_contest_without_teams(self, settlement, make_contest):
        contest_id = await make_contest()
        result = await settlement.settle_contest(contest_id)
        assert result.payouts == []
        assert result.participant_count == 0

    async def test_cannot_settle_twice(self, settlement, make_contest, make_team):
        contest_id = await make_contest()
        await add_teams(make_team, contest_id, [1.0])
        await settlement.settle_contest(contest_id)
        with pytest.raises(ContestStateError):
            await settlement.settle_contest(contest_id)

    async def test_cancelled_contest(self, settlement, make_contest):
        contest_id = await make_contest(status=ContestStatus.CANCELLED)
        with pytest.raises(ContestStateError):
            await settlement.settle_contest(contest_id)

    async def test_unknown_contest(self, settlement, database):
        with pytest.raises(ContestNotFound):
            await settlement.settle_contest(404)


class TestBreakdown:
    def test_passthrough(self):
        breakdown = SettlementService.get_prize_breakdown(10000, 15)
        assert [e.amount for e in breakdown.entries] == [4000.0, 2400.0, 1600.0]

    async def test_breakdown_for_current_entries(self, settlement, make_contest, make_team):
        contest_id = await make_contest(prize_pool=5000.0)
        await add_teams(make_team, contest_id, [0.0] * 30)
        breakdown = await settlement.get_contest_breakdown(contest_id)
        assert breakdown.participant_count == 30
        assert breakdown.paid_positions == 10
        assert breakdown.total_amount == pytest.approx(5000.0)
