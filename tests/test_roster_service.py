"""
Tests for team entry, roster edits and ownership statistics.
"""

from datetime import datetime

import pytest

from fantasy.data_models.roster import ChangeFrequency, ContestRules
from fantasy.database.models import Contest, ContestStatus
from fantasy.database.repositories import TeamRepository
from fantasy.services.roster import RosterService
from fantasy.utils.exceptions import (
    BudgetExceeded, ContestNotFound, ContestStateError, EditFrequencyExceeded, EditWindowClosed,
    InvalidRosterSize, TeamNotFound, TooManyPlayersChanged
)

EDITABLE = ContestRules(
    allow_team_changes=True,
    change_frequency=ChangeFrequency.ONCE,
    max_players_to_change=2,
)
BEFORE_START = datetime(2026, 4, 30, 12, 0)
DURING = datetime(2026, 5, 3, 19, 0)


@pytest.fixture
def rosters(session_factory):
    return RosterService(session_factory)


async def entries(database, contest_id):
    async with database.get_session() as session:
        return (await session.get(Contest, contest_id)).current_entries


async def roster_of(database, team_id):
    async with database.get_session() as session:
        team = await TeamRepository().get(session, team_id)
        return sorted(team.selections(), key=lambda slot: slot.player_id)


class TestCreateTeam:
    async def test_valid_team(self, rosters, database, seed_players, make_contest, picks):
        contest_id = await make_contest()
        team = await rosters.create_team(contest_id, owner_id=42, name="Kitchen Kings",
                                         selection=picks(range(1, 8), 1, 2))

        assert team.id is not None
        assert team.budget_spent == 70000
        assert team.total_points == 0.0
        assert await entries(database, contest_id) == 1

        slots = await roster_of(database, team.id)
        assert [slot.player_id for slot in slots] == [1, 2, 3, 4, 5, 6, 7]
        assert slots[0].is_captain and slots[1].is_vice_captain

    async def test_rejected_roster_takes_no_entry(self, rosters, database, seed_players, make_contest, picks):
        contest_id = await make_contest()
        with pytest.raises(InvalidRosterSize):
            await rosters.create_team(contest_id, 42, "Short", picks(range(1, 7), 1, 2))
        assert await entries(database, contest_id) == 0

    async def test_explicit_price_list(self, rosters, seed_players, make_contest, picks):
        contest_id = await make_contest()
        prices = {player_id: 20000.0 for player_id in range(1, 11)}
        with pytest.raises(BudgetExceeded):
            await rosters.create_team(contest_id, 42, "Big Spenders", picks(range(1, 8), 1, 2), prices)

    async def test_full_contest(self, rosters, seed_players, make_contest, picks):
        contest_id = await make_contest(max_entries=1)
        await rosters.create_team(contest_id, 1, "First", picks(range(1, 8), 1, 2))
        with pytest.raises(ContestStateError):
            await rosters.create_team(contest_id, 2, "Second", picks(range(2, 9), 2, 3))

    async def test_closed_contest(self, rosters, seed_players, make_contest, picks):
        contest_id = await make_contest(status=ContestStatus.COMPLETED)
        with pytest.raises(ContestStateError):
            await rosters.create_team(contest_id, 1, "Late", picks(range(1, 8), 1, 2))

    async def test_unknown_contest(self, rosters, seed_players, picks):
        with pytest.raises(ContestNotFound):
            await rosters.create_team(404, 1, "Nowhere", picks(range(1, 8), 1, 2))


class TestEditTeam:
    async def _team(self, rosters, make_contest, picks, rules=EDITABLE):
        contest_id = await make_contest(rules=rules)
        team = await rosters.create_team(contest_id, 42, "Editors", picks(range(1, 8), 1, 2))
        return team.id

    async def test_free_edits_before_start(self, rosters, database, seed_players, make_contest, picks):
        team_id = await self._team(rosters, make_contest, picks)
        await rosters.edit_team(team_id, picks([1, 2, 6, 7, 8, 9, 10], 8, 9), now=BEFORE_START)
        await rosters.edit_team(team_id, picks(range(1, 8), 1, 2), now=BEFORE_START)

        slots = await roster_of(database, team_id)
        assert [slot.player_id for slot in slots] == [1, 2, 3, 4, 5, 6, 7]

    async def test_single_edit_during_tournament(self, rosters, database, seed_players, make_contest, picks):
        team_id = await self._team(rosters, make_contest, picks)

        team = await rosters.edit_team(team_id, picks([1, 2, 3, 4, 5, 8, 9], 8, 1), now=DURING)
        assert team.edit_count == 1
        assert team.last_edited_at == DURING

        slots = await roster_of(database, team_id)
        assert {slot.player_id for slot in slots} == {1, 2, 3, 4, 5, 8, 9}
        assert [slot.player_id for slot in slots if slot.is_captain] == [8]

        with pytest.raises(EditFrequencyExceeded):
            await rosters.edit_team(team_id, picks([1, 2, 3, 4, 5, 8, 10], 8, 1),
                                    now=datetime(2026, 5, 5, 19, 0))

    async def test_too_many_changes(self, rosters, seed_players, make_contest, picks):
        team_id = await self._team(rosters, make_contest, picks)
        with pytest.raises(TooManyPlayersChanged):
            await rosters.edit_team(team_id, picks([1, 2, 3, 4, 8, 9, 10], 1, 2), now=DURING)

    async def test_locked_contest(self, rosters, seed_players, make_contest, picks):
        team_id = await self._team(rosters, make_contest, picks, rules=ContestRules())
        with pytest.raises(EditWindowClosed):
            await rosters.edit_team(team_id, picks(range(1, 8), 2, 1), now=BEFORE_START)

    async def test_unknown_team(self, rosters, seed_players, picks):
        with pytest.raises(TeamNotFound):
            await rosters.edit_team(404, picks(range(1, 8), 1, 2), now=DURING)


class TestOwnership:
    async def test_percentages_from_rosters(self, rosters, seed_players, make_contest, picks):
        contest_id = await make_contest()
        await rosters.create_team(contest_id, 1, "One", picks(range(1, 8), 1, 2))
        await rosters.create_team(contest_id, 2, "Two", picks([1, 2, 3, 4, 5, 6, 8], 2, 1))

        ownership = {item.player_id: item for item in await rosters.get_ownership(contest_id)}

        assert ownership[1].selected_by == 2
        assert ownership[1].selection_percentage == 100.0
        assert ownership[1].captain_percentage == 50.0
        assert ownership[1].vice_captained_by == 1
        assert ownership[7].selection_percentage == 50.0
        assert ownership[8].captained_by == 0
        assert 9 not in ownership

    async def test_most_selected_first(self, rosters, seed_players, make_contest, picks):
        contest_id = await make_contest()
        await rosters.create_team(contest_id, 1, "One", picks(range(1, 8), 1, 2))
        await rosters.create_team(contest_id, 2, "Two", picks(range(4, 11), 4, 5))

        ordered = [item.player_id for item in await rosters.get_ownership(contest_id)]
        assert ordered[:4] == [4, 5, 6, 7]

    async def test_empty_contest(self, rosters, make_contest):
        contest_id = await make_contest()
        assert await rosters.get_ownership(contest_id) == []
