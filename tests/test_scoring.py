"""
Tests for player performance scoring.
"""

import pytest

from fantasy import score_match_performance, score_tournament_performance, summarize_tournament_performance
from fantasy.data_models.scoring import DEFAULT_POINTS_CONFIG, MatchPerformance, PointsConfig, TournamentPerformance
from fantasy.utils.exceptions import InvalidRulesError
from fantasy.utils.scoring import PerformanceScorer


def strong_win(match_id=1):
    return MatchPerformance(
        player_id=7,
        match_id=match_id,
        is_match_winner=True,
        is_set_winner=[True, True],
        points_scored=22,
        points_conceded=15,
        winners=5,
        aces=2,
        errors=3,
        faults=1,
        rallies_won=10,
    )


def disaster(match_id=2):
    return MatchPerformance(player_id=7, match_id=match_id, errors=20, faults=10, points_conceded=33)


class TestMatchScoring:
    def test_full_stat_line(self):
        assert score_match_performance(strong_win(), DEFAULT_POINTS_CONFIG) == pytest.approx(50.5)

    def test_loss_with_no_stats_earns_participation_points(self):
        assert score_match_performance(MatchPerformance(player_id=1)) == 2

    def test_all_penalty_match_is_clamped_to_zero(self):
        assert score_match_performance(disaster()) == 0.0

    def test_only_won_sets_count(self):
        performance = MatchPerformance(player_id=1, is_set_winner=[True, False, True])
        assert performance.sets_won == 2
        assert score_match_performance(performance) == 2 + 2 * 5

    def test_custom_config(self):
        config = PointsConfig.from_dict({"matchWin": 20, "setWin": 0})
        performance = MatchPerformance(player_id=1, is_match_winner=True, is_set_winner=[True])
        assert score_match_performance(performance, config) == 20


class TestTournamentScoring:
    @pytest.mark.parametrize("position, bonus", [
        (1, 25), (2, 15), (3, 10), (4, 10), (5, 5), (8, 5), (9, 0), (None, 0),
    ])
    def test_position_bonus(self, position, bonus):
        assert PerformanceScorer.position_bonus(position) == bonus

    def test_each_match_is_clamped_before_summing(self):
        performance = TournamentPerformance(
            player_id=7, matches=[strong_win(), disaster()], tournament_position=1
        )
        assert score_tournament_performance(performance, DEFAULT_POINTS_CONFIG) == pytest.approx(75.5)

    def test_no_matches_only_position_bonus(self):
        performance = TournamentPerformance(player_id=7, tournament_position=2)
        assert score_tournament_performance(performance) == 15

    def test_summary(self):
        performance = TournamentPerformance(
            player_id=7, matches=[disaster(), strong_win(match_id=5)], tournament_position=3
        )
        summary = summarize_tournament_performance(performance)
        assert summary.matches_played == 2
        assert summary.matches_won == 1
        assert summary.sets_won == 2
        assert summary.win_rate == 50.0
        assert summary.best_match_id == 5
        assert summary.best_match_points == pytest.approx(50.5)
        assert summary.total_points == pytest.approx(60.5)

    def test_empty_summary(self):
        summary = summarize_tournament_performance(TournamentPerformance(player_id=1))
        assert summary.matches_played == 0
        assert summary.win_rate == 0.0
        assert summary.best_match_id is None


class TestPointsConfig:
    def test_defaults(self):
        config = PointsConfig()
        assert (config.match_win, config.match_loss, config.set_win) == (10, 2, 5)
        assert config.point_lost == -0.2
        assert config.tournament_winner == 25

    def test_snake_and_camel_case_keys(self):
        config = PointsConfig.from_dict({"match_win": 12, "rallyWon": 2})
        assert config.match_win == 12
        assert config.rally_won == 2
        assert config.ace == 3

    def test_unknown_key_rejected(self):
        with pytest.raises(InvalidRulesError):
            PointsConfig.from_dict({"dinkShot": 4})

    @pytest.mark.parametrize("value", ["10", True, None])
    def test_non_numeric_value_rejected(self, value):
        with pytest.raises(InvalidRulesError):
            PointsConfig.from_dict({"matchWin": value})
