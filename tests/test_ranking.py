"""
Tests for leaderboard ranking order and pagination helpers.
"""

from datetime import datetime
from types import SimpleNamespace

import pytest

from fantasy.utils.ranking import RankingUtility


def team(team_id, points, created_at=None):
    return SimpleNamespace(id=team_id, name=f"Team {team_id}", owner_id=100 + team_id,
                           total_points=points, created_at=created_at)


EARLY = datetime(2026, 4, 1, 10, 0)
LATE = datetime(2026, 4, 2, 10, 0)


class TestRankTeams:
    def test_points_descending(self):
        entries = RankingUtility.rank_teams([team(1, 10, EARLY), team(2, 30, EARLY), team(3, 20, EARLY)])
        assert [e.team_id for e in entries] == [2, 3, 1]
        assert [e.rank for e in entries] == [1, 2, 3]

    def test_tie_broken_by_creation_time(self):
        entries = RankingUtility.rank_teams([team(1, 50, LATE), team(2, 50, EARLY)])
        assert [e.team_id for e in entries] == [2, 1]

    def test_tie_broken_by_id_last(self):
        entries = RankingUtility.rank_teams([team(9, 50, EARLY), team(4, 50, EARLY)])
        assert [e.team_id for e in entries] == [4, 9]

    def test_undated_teams_sort_after_dated_ones(self):
        entries = RankingUtility.rank_teams([team(1, 50), team(2, 50, LATE)])
        assert [e.team_id for e in entries] == [2, 1]

    def test_ranks_are_unique_even_when_everything_ties(self):
        entries = RankingUtility.rank_teams([team(i, 0, EARLY) for i in range(10, 0, -1)])
        assert [e.rank for e in entries] == list(range(1, 11))
        assert [e.team_id for e in entries] == list(range(1, 11))

    def test_entry_fields(self):
        entry = RankingUtility.rank_teams([team(3, 12.5, EARLY)])[0]
        assert (entry.team_name, entry.owner_id, entry.total_points) == ("Team 3", 103, 12.5)


class TestPagination:
    def test_paginate(self):
        entries = RankingUtility.rank_teams([team(i, i, EARLY) for i in range(1, 6)])
        assert [e.rank for e in RankingUtility.paginate(entries, 2, 2)] == [3, 4]
        assert [e.rank for e in RankingUtility.paginate(entries, 3, 2)] == [5]
        assert RankingUtility.paginate(entries, 4, 2) == []

    @pytest.mark.parametrize("total, size, pages", [(0, 10, 1), (10, 10, 1), (11, 10, 2), (5, 2, 3)])
    def test_total_pages(self, total, size, pages):
        assert RankingUtility.total_pages(total, size) == pages

    @pytest.mark.parametrize("page, size", [(0, 10), (1, 0), (1, 101), ("1", 10)])
    def test_invalid_pagination(self, page, size):
        with pytest.raises(ValueError):
            RankingUtility.validate_pagination(page, size, 100)
