"""
Team point aggregation.

Applies scoring events to the running ``total_points`` of every fantasy team
holding an affected player. Each (event_key, team) pair is recorded in the
``applied_scoring_events`` ledger, so re-delivery of an event is a no-op, and
each team total is written with a compare-and-swap on ``FantasyTeam.version``
so concurrent deltas for the same team never lose an update.
"""

import functools
import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, OperationalError

from fantasy.config import Config
from fantasy.data_models.events import EventApplication, ScoringEvent, ScoringEventType, TeamDelta
from fantasy.database.models import FantasyTeam
from fantasy.database.repositories import TeamRepository
from fantasy.services.base import BaseService
from fantasy.utils.exceptions import ConcurrentUpdateError, DuplicateEventIgnored
from fantasy.utils.multipliers import apply_role_multiplier

logger = logging.getLogger(__name__)


class TeamAggregatorService(BaseService):
    """Idempotent, concurrency-safe accumulator for fantasy team totals."""

    def __init__(self, session_factory, team_repository: Optional[TeamRepository] = None,
                 max_retries: Optional[int] = None):
        super().__init__(session_factory)
        self.teams = team_repository or TeamRepository()
        self.max_retries = Config.AGGREGATOR_MAX_RETRIES if max_retries is None else max_retries

    @staticmethod
    def team_points(team: FantasyTeam, event: ScoringEvent) -> float:
        """Role-adjusted points an event contributes to one team."""
        total = 0.0
        for slot in team.slots:
            if slot.player_id in event.player_points:
                total += apply_role_multiplier(
                    event.player_points[slot.player_id], slot.is_captain, slot.is_vice_captain
                )
        return total

    async def _target_teams(self, event: ScoringEvent) -> List[Tuple[int, int]]:
        """(team_id, contest_id) for every open-contest team holding an affected player."""
        async with self.get_session() as session:
            teams = await self.teams.find_holding_players(
                session, event.player_points.keys(), event.contest_id, event.tournament_id
            )
            targets = []
            for team in teams:
                if team.contest.status.is_final:
                    logger.debug(
                        f"Skipping team {team.id}: contest {team.contest_id} is {team.contest.status.value}"
                    )
                    continue
                targets.append((team.id, team.contest_id))
            return targets

    async def apply_match_event(self, event: ScoringEvent) -> EventApplication:
        """
        Apply a scoring event to every affected team.

        Teams that already recorded ``event.event_key`` are reported with
        ``duplicate=True`` and left unchanged. A MATCH_COMPLETION for a match
        that already completed under another key replaces the earlier result, and a
        completion supersedes the live points recorded for its match.

        Raises:
            TransactionError: A team's update kept losing to concurrent writers
        """
        deltas = []
        for team_id, contest_id in await self._target_teams(event):
            attempt = functools.partial(self._apply_to_team, event, team_id, contest_id)
            try:
                delta = await self.execute_with_retry(
                    attempt,
                    max_retries=self.max_retries,
                    retry_on=(ConcurrentUpdateError, OperationalError),
                    operation=f"apply event '{event.event_key}' to team {team_id}",
                )
            except DuplicateEventIgnored as e:
                logger.info(str(e))
                total, _ = await self._read_total(team_id)
                delta = TeamDelta(team_id=team_id, contest_id=contest_id, points=0.0,
                                  new_total=total, duplicate=True)
            deltas.append(delta)

        applied = [d for d in deltas if not d.duplicate]
        if applied:
            logger.info(
                f"Event '{event.event_key}' (match {event.match_id}) applied to {len(applied)} team(s)"
            )
        return EventApplication(event_key=event.event_key, match_id=event.match_id, deltas=deltas)

    async def _apply_to_team(self, event: ScoringEvent, team_id: int, contest_id: int) -> TeamDelta:
        """One attempt: ledger insert, optional reversal and CAS in a single transaction."""
        async with self.get_session() as session:
            team = await self.teams.get(session, team_id)
            points = self.team_points(team, event)

            if await self.teams.find_ledger_entry(session, event.event_key, team_id) is not None:
                raise DuplicateEventIgnored(event.event_key, team_id)

            reversed_points = 0.0
            if event.event_type == ScoringEventType.MATCH_COMPLETION:
                previous = await self.teams.find_active_completion(session, team_id, event.match_id)
                if previous is not None:
                    reversed_points = previous.points
                    await self.teams.reverse_ledger_entry(session, previous)
                    logger.info(
                        f"Correcting match {event.match_id} for team {team_id}: "
                        f"reversing '{previous.event_key}' ({previous.points:+g})"
                    )
                live = await self.teams.find_active_partials(session, team_id, event.match_id)
                for entry in live:
                    reversed_points += entry.points
                    await self.teams.reverse_ledger_entry(session, entry)
                if live:
                    logger.info(
                        f"Match {event.match_id} final for team {team_id}: "
                        f"replacing {len(live)} live point entries"
                    )
                superseded = False
            else:
                superseded = await self.teams.find_active_completion(
                    session, team_id, event.match_id
                ) is not None

            try:
                entry = await self.teams.add_ledger_entry(
                    session, event.event_key, team_id, event.match_id, event.event_type, points
                )
            except IntegrityError as e:
                # A concurrent delivery of the same key got there first
                raise DuplicateEventIgnored(event.event_key, team_id) from e

            if superseded:
                # The final result already counts every point of this match
                await self.teams.reverse_ledger_entry(session, entry)
                logger.debug(f"Late point '{event.event_key}' for team {team_id} recorded without effect")
                points = 0.0

            total, version = await self.teams.read_total(session, team_id)
            new_total = total + points - reversed_points
            if not await self.teams.compare_and_swap_total(session, team_id, version, new_total):
                raise ConcurrentUpdateError(team_id, version)

            logger.debug(f"Team {team_id}: {points - reversed_points:+g} -> {new_total:g}")
            return TeamDelta(
                team_id=team_id,
                contest_id=contest_id,
                points=points - reversed_points,
                new_total=new_total,
                reversed_points=reversed_points,
            )

    async def _read_total(self, team_id: int) -> Tuple[float, int]:
        async with self.get_session() as session:
            return await self.teams.read_total(session, team_id)

    async def resettle_team(self, team_id: int) -> float:
        """Recompute a team's total from its non-reversed ledger entries."""

        async def attempt():
            async with self.get_session() as session:
                expected = await self.teams.ledger_total(session, team_id)
                _, version = await self.teams.read_total(session, team_id)
                if not await self.teams.compare_and_swap_total(session, team_id, version, expected):
                    raise ConcurrentUpdateError(team_id, version)
                return expected

        total = await self.execute_with_retry(
            attempt,
            max_retries=self.max_retries,
            retry_on=(ConcurrentUpdateError, OperationalError),
            operation=f"resettle team {team_id}",
        )
        logger.info(f"Team {team_id} resettled to {total:g}")
        return total
