"""
Shared fixtures: a fresh SQLite database per test plus small factories for
players, contests and teams.
"""

from datetime import datetime

import pytest

from fantasy.config import Config
from fantasy.data_models.roster import ContestRules, RosterSelection
from fantasy.database.database import Database
from fantasy.database.models import Contest, ContestStatus, FantasyTeam, Player, RosterSlot

TOURNAMENT_START = datetime(2026, 5, 1, 9, 0)
TOURNAMENT_END = datetime(2026, 5, 10, 23, 0)
PLAYER_PRICE = 10000.0


@pytest.fixture(autouse=True, scope="session")
def _log_dir(tmp_path_factory):
    Config.LOG_DIR = str(tmp_path_factory.mktemp("logs"))


@pytest.fixture
async def database(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'fantasy_test.db'}")
    await db.initialize()
    yield db
    await db.close()


@pytest.fixture
def session_factory(database):
    return database.session_factory


@pytest.fixture
def picks():
    """Build a roster selection from player ids and the two role holders."""
    def _picks(player_ids, captain, vice_captain):
        return [
            RosterSelection(player_id, player_id == captain, player_id == vice_captain)
            for player_id in player_ids
        ]
    return _picks


@pytest.fixture
async def seed_players(database):
    """Players 1..10 at a flat price; returns the price list."""
    async with database.transaction() as session:
        session.add_all([
            Player(id=player_id, name=f"Player {player_id}", skill_level="ADVANCED", price=PLAYER_PRICE)
            for player_id in range(1, 11)
        ])
    return {player_id: PLAYER_PRICE for player_id in range(1, 11)}


@pytest.fixture
def make_contest(database):
    async def _make(rules=None, **fields):
        values = dict(
            name="Summer Slam",
            tournament_id=1,
            entry_fee=0.0,
            prize_pool=10000.0,
            current_entries=0,
            status=ContestStatus.UPCOMING,
            tournament_start=TOURNAMENT_START,
            tournament_end=TOURNAMENT_END,
            rules=(rules or ContestRules()).to_json(),
        )
        values.update(fields)
        async with database.transaction() as session:
            contest = Contest(**values)
            session.add(contest)
            await session.flush()
            return contest.id
    return _make


@pytest.fixture
def make_team(database):
    """Insert a team directly, bypassing roster validation."""
    async def _make(contest_id, slots, total_points=0.0, created_at=None, name=None, owner_id=1):
        async with database.transaction() as session:
            team = FantasyTeam(
                contest_id=contest_id,
                owner_id=owner_id,
                name=name or "Team",
                total_points=total_points,
                budget_spent=0.0,
                version=1,
                created_at=created_at or datetime(2026, 4, 1, 12, 0),
                slots=[
                    RosterSlot(player_id=player_id, is_captain=role == "C", is_vice_captain=role == "VC")
                    for player_id, role in slots
                ],
            )
            session.add(team)
            await session.flush()
            return team.id
    return _make


@pytest.fixture
def team_total(database):
    async def _total(team_id):
        async with database.get_session() as session:
            team = await session.get(FantasyTeam, team_id)
            return team.total_points
    return _total
