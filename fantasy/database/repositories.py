"""
Repository layer for teams, contests, matches and players.

Repositories are stateless query helpers. Every method takes the caller's
``AsyncSession`` so the calling service owns the transaction boundary; the
services receive repository instances by injection.
"""

from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy import select, update, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from fantasy.data_models.events import ScoringEventType
from fantasy.data_models.roster import RosterSelection
from fantasy.data_models.scoring import MatchStatus
from fantasy.database.models import (
    AppliedScoringEvent, Contest, ContestStatus, FantasyTeam, Match, Player, RosterSlot, utcnow
)
from fantasy.utils.exceptions import ContestNotFound, MatchNotFound, TeamNotFound


class TeamRepository:
    """Fantasy teams, their roster slots and the applied-event ledger."""

    async def get(self, session: AsyncSession, team_id: int) -> FantasyTeam:
        team = await session.get(FantasyTeam, team_id, options=[selectinload(FantasyTeam.contest)])
        if team is None:
            raise TeamNotFound(team_id)
        return team

    async def add(self, session: AsyncSession, team: FantasyTeam) -> FantasyTeam:
        session.add(team)
        await session.flush()
        return team

    async def list_for_contest(self, session: AsyncSession, contest_id: int) -> List[FantasyTeam]:
        result = await session.execute(
            select(FantasyTeam).where(FantasyTeam.contest_id == contest_id)
        )
        return list(result.scalars().all())

    async def count_for_contest(self, session: AsyncSession, contest_id: int) -> int:
        return await session.scalar(
            select(func.count(FantasyTeam.id)).where(FantasyTeam.contest_id == contest_id)
        )

    async def find_holding_players(
        self,
        session: AsyncSession,
        player_ids: Iterable[int],
        contest_id: Optional[int] = None,
        tournament_id: Optional[int] = None,
    ) -> List[FantasyTeam]:
        """Teams holding any of the given players, optionally within one contest or tournament."""
        player_ids = list(player_ids)
        if not player_ids:
            return []
        holding = select(RosterSlot.team_id).where(RosterSlot.player_id.in_(player_ids))
        query = (
            select(FantasyTeam)
            .options(selectinload(FantasyTeam.contest))
            .where(FantasyTeam.id.in_(holding))
            .order_by(FantasyTeam.id)
        )
        if contest_id is not None:
            query = query.where(FantasyTeam.contest_id == contest_id)
        if tournament_id is not None:
            query = query.join(FantasyTeam.contest).where(Contest.tournament_id == tournament_id)
        result = await session.execute(query)
        return list(result.scalars().all())

    async def compare_and_swap_total(
        self, session: AsyncSession, team_id: int, expected_version: int, new_total: float
    ) -> bool:
        """Write a new total only if nobody else changed the team since it was read."""
        result = await session.execute(
            update(FantasyTeam)
            .where(FantasyTeam.id == team_id, FantasyTeam.version == expected_version)
            .values(total_points=new_total, version=expected_version + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def read_total(self, session: AsyncSession, team_id: int):
        """Fresh (total_points, version) for a team, bypassing the identity map."""
        row = (await session.execute(
            select(FantasyTeam.total_points, FantasyTeam.version).where(FantasyTeam.id == team_id)
        )).one_or_none()
        if row is None:
            raise TeamNotFound(team_id)
        return row.total_points or 0.0, row.version

    async def replace_slots(
        self, session: AsyncSession, team: FantasyTeam, selections: Sequence[RosterSelection]
    ) -> None:
        """Replace a team's roster wholesale."""
        team.slots.clear()
        await session.flush()
        for selection in selections:
            team.slots.append(RosterSlot(
                player_id=selection.player_id,
                is_captain=selection.is_captain,
                is_vice_captain=selection.is_vice_captain,
            ))
        await session.flush()

    # Ledger --------------------------------------------------------------

    async def find_ledger_entry(
        self, session: AsyncSession, event_key: str, team_id: int
    ) -> Optional[AppliedScoringEvent]:
        return await session.scalar(
            select(AppliedScoringEvent).where(
                AppliedScoringEvent.event_key == event_key,
                AppliedScoringEvent.team_id == team_id,
            )
        )

    async def find_active_completion(
        self, session: AsyncSession, team_id: int, match_id: int
    ) -> Optional[AppliedScoringEvent]:
        """The completion event currently counted for a team and match, if any."""
        return await session.scalar(
            select(AppliedScoringEvent).where(
                AppliedScoringEvent.team_id == team_id,
                AppliedScoringEvent.match_id == match_id,
                AppliedScoringEvent.event_type == ScoringEventType.MATCH_COMPLETION.value,
                AppliedScoringEvent.is_reversed == False,  # noqa: E712
            )
        )

    async def find_active_partials(
        self, session: AsyncSession, team_id: int, match_id: int
    ) -> List[AppliedScoringEvent]:
        """Live point entries still counted for a team and match."""
        result = await session.execute(
            select(AppliedScoringEvent).where(
                AppliedScoringEvent.team_id == team_id,
                AppliedScoringEvent.match_id == match_id,
                AppliedScoringEvent.event_type == ScoringEventType.PARTIAL_UPDATE.value,
                AppliedScoringEvent.is_reversed == False,  # noqa: E712
            )
        )
        return list(result.scalars().all())

    async def add_ledger_entry(
        self,
        session: AsyncSession,
        event_key: str,
        team_id: int,
        match_id: int,
        event_type: ScoringEventType,
        points: float,
    ) -> AppliedScoringEvent:
        entry = AppliedScoringEvent(
            event_key=event_key,
            team_id=team_id,
            match_id=match_id,
            event_type=event_type.value,
            points=points,
        )
        session.add(entry)
        await session.flush()  # unique (event_key, team_id) fires here
        return entry

    async def reverse_ledger_entry(self, session: AsyncSession, entry: AppliedScoringEvent) -> None:
        entry.is_reversed = True
        entry.reversed_at = utcnow()
        await session.flush()

    async def ledger_total(self, session: AsyncSession, team_id: int) -> float:
        total = await session.scalar(
            select(func.coalesce(func.sum(AppliedScoringEvent.points), 0.0)).where(
                AppliedScoringEvent.team_id == team_id,
                AppliedScoringEvent.is_reversed == False,  # noqa: E712
            )
        )
        return float(total or 0.0)


class ContestRepository:
    """Contests and their entry counters."""

    async def get(self, session: AsyncSession, contest_id: int) -> Contest:
        contest = await session.get(Contest, contest_id)
        if contest is None:
            raise ContestNotFound(contest_id)
        return contest

    async def get_for_update(self, session: AsyncSession, contest_id: int) -> Contest:
        # NOTE: On SQLite, with_for_update() relies on the database-level write lock
        contest = await session.scalar(
            select(Contest).where(Contest.id == contest_id).with_for_update()
        )
        if contest is None:
            raise ContestNotFound(contest_id)
        return contest

    async def add(self, session: AsyncSession, contest: Contest) -> Contest:
        session.add(contest)
        await session.flush()
        return contest

    async def list_scoring(
        self, session: AsyncSession, tournament_id: int, contest_id: Optional[int] = None
    ) -> List[Contest]:
        """In-progress contests built on a tournament."""
        query = (
            select(Contest)
            .where(Contest.tournament_id == tournament_id, Contest.status == ContestStatus.IN_PROGRESS)
            .order_by(Contest.id)
        )
        if contest_id is not None:
            query = query.where(Contest.id == contest_id)
        result = await session.execute(query)
        return list(result.scalars().all())

    async def reserve_entry(self, session: AsyncSession, contest_id: int) -> bool:
        """Atomically take one entry slot; False when the contest is full."""
        result = await session.execute(
            update(Contest)
            .where(
                Contest.id == contest_id,
                or_(Contest.max_entries.is_(None), Contest.current_entries < Contest.max_entries),
            )
            .values(current_entries=Contest.current_entries + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def set_status(
        self, session: AsyncSession, contest: Contest, status: ContestStatus
    ) -> Contest:
        contest.status = status
        if status == ContestStatus.COMPLETED:
            contest.completed_at = utcnow()
        await session.flush()
        return contest


class MatchRepository:
    """Matches as reported by the scoring subsystem."""

    async def get(self, session: AsyncSession, match_id: int) -> Match:
        match = await session.get(Match, match_id)
        if match is None:
            raise MatchNotFound(match_id)
        return match

    async def add(self, session: AsyncSession, match: Match) -> Match:
        session.add(match)
        await session.flush()
        return match

    async def record_result(
        self,
        session: AsyncSession,
        match_id: int,
        player1_score: int,
        player2_score: int,
        status: MatchStatus = MatchStatus.COMPLETED,
    ) -> Match:
        match = await self.get(session, match_id)
        match.player1_score = player1_score
        match.player2_score = player2_score
        match.status = status
        if status == MatchStatus.COMPLETED:
            match.completed_at = utcnow()
        await session.flush()
        return match


class PlayerRepository:
    """Real players and their fantasy prices."""

    async def add(self, session: AsyncSession, player: Player) -> Player:
        session.add(player)
        await session.flush()
        return player

    async def price_list(self, session: AsyncSession) -> Dict[int, float]:
        """player_id -> price for every active player."""
        result = await session.execute(
            select(Player.id, Player.price).where(Player.is_active == True)  # noqa: E712
        )
        return {row.id: row.price for row in result}
