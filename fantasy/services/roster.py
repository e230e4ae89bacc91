"""
Roster service: team entry, roster edits and ownership statistics.

All roster rules are enforced by the pure validator in
``fantasy.utils.roster_validator``; this service loads the contest state,
runs the validator and persists the accepted roster.
"""

import logging
from collections import Counter
from datetime import datetime
from typing import Iterable, List, Mapping, Optional

from fantasy.data_models.roster import PlayerOwnership, RosterSelection
from fantasy.database.models import ContestStatus, FantasyTeam, RosterSlot, utcnow
from fantasy.database.repositories import ContestRepository, PlayerRepository, TeamRepository
from fantasy.services.base import BaseService
from fantasy.utils.exceptions import ContestStateError
from fantasy.utils.roster_validator import validate_roster, validate_roster_edit

logger = logging.getLogger(__name__)

OPEN_STATUSES = (ContestStatus.UPCOMING, ContestStatus.IN_PROGRESS)


class RosterService(BaseService):
    """Create and edit fantasy teams."""

    def __init__(self, session_factory, team_repository: Optional[TeamRepository] = None,
                 contest_repository: Optional[ContestRepository] = None,
                 player_repository: Optional[PlayerRepository] = None):
        super().__init__(session_factory)
        self.teams = team_repository or TeamRepository()
        self.contests = contest_repository or ContestRepository()
        self.players = player_repository or PlayerRepository()

    async def create_team(self,
                          contest_id: int,
                          owner_id: int,
                          name: str,
                          selection: Iterable[RosterSelection],
                          prices: Optional[Mapping[int, float]] = None) -> FantasyTeam:
        """
        Enter a new team into a contest.

        Args:
            contest_id: Contest to join
            owner_id: User creating the team
            name: Team name
            selection: Roster picks with captain/vice-captain flags
            prices: Price list override; defaults to the active players' prices

        Raises:
            ContestNotFound: Unknown contest
            ContestStateError: Contest closed or full
            RosterValidationError: Roster rejected
        """
        selection = tuple(selection)
        async with self.get_session() as session:
            contest = await self.contests.get_for_update(session, contest_id)
            if contest.status not in OPEN_STATUSES:
                raise ContestStateError(contest_id, contest.status.value, "join")

            if prices is None:
                prices = await self.players.price_list(session)
            roster = validate_roster(selection, contest.parsed_rules, prices)

            if not await self.contests.reserve_entry(session, contest_id):
                raise ContestStateError(contest_id, "FULL", "join")

            team = FantasyTeam(
                contest_id=contest_id,
                owner_id=owner_id,
                name=name,
                total_points=0.0,
                budget_spent=roster.budget_spent,
                version=1,
                edit_count=0,
                slots=[
                    RosterSlot(player_id=slot.player_id,
                               is_captain=slot.is_captain,
                               is_vice_captain=slot.is_vice_captain)
                    for slot in roster.slots
                ],
            )
            await self.teams.add(session, team)
            logger.info(f"Team {team.id} '{name}' joined contest {contest_id} (owner {owner_id})")
            return team

    async def edit_team(self,
                        team_id: int,
                        selection: Iterable[RosterSelection],
                        prices: Optional[Mapping[int, float]] = None,
                        now: Optional[datetime] = None,
                        current_matchday: Optional[int] = None) -> FantasyTeam:
        """
        Replace a team's roster after checking the contest's edit policy.

        Raises:
            TeamNotFound: Unknown team
            ContestStateError: Contest completed or cancelled
            RosterEditError: Edit policy rejected the change
            RosterValidationError: New roster rejected
        """
        now = now or utcnow()
        selection = tuple(selection)
        async with self.get_session() as session:
            team = await self.teams.get(session, team_id)
            contest = team.contest
            if contest.status.is_final:
                raise ContestStateError(contest.id, contest.status.value, "edit")

            if prices is None:
                prices = await self.players.price_list(session)
            roster = validate_roster_edit(
                team.selections(),
                selection,
                contest.parsed_rules,
                prices,
                team.edit_context(contest, current_matchday),
                now,
            )

            await self.teams.replace_slots(session, team, roster.slots)
            team.budget_spent = roster.budget_spent
            if now >= contest.tournament_start:
                team.edit_count = (team.edit_count or 0) + 1
                team.last_edit_matchday = current_matchday
            team.last_edited_at = now
            await session.flush()
            logger.info(f"Team {team_id} roster updated ({len(roster.slots)} players)")
            return team

    async def get_ownership(self, contest_id: int) -> List[PlayerOwnership]:
        """Selection and captaincy rates per player across a contest's rosters.

        Sorted by selection count, most picked first.
        """
        async with self.get_session() as session:
            await self.contests.get(session, contest_id)
            teams = await self.teams.list_for_contest(session, contest_id)

        team_count = len(teams)
        selected, captained, vice_captained = Counter(), Counter(), Counter()
        for team in teams:
            for slot in team.slots:
                selected[slot.player_id] += 1
                if slot.is_captain:
                    captained[slot.player_id] += 1
                elif slot.is_vice_captain:
                    vice_captained[slot.player_id] += 1

        ownership = [
            PlayerOwnership(
                player_id=player_id,
                selected_by=count,
                captained_by=captained[player_id],
                vice_captained_by=vice_captained[player_id],
                selection_percentage=round(count * 100 / team_count, 2),
                captain_percentage=round(captained[player_id] * 100 / team_count, 2),
            )
            for player_id, count in selected.items()
        ]
        ownership.sort(key=lambda item: (-item.selected_by, item.player_id))
        return ownership
