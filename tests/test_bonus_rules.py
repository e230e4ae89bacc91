"""
Tests for match-outcome bonuses, the knockout multiplier and role multipliers.
"""

import pytest

from fantasy import apply_match_bonuses, apply_role_multiplier
from fantasy.data_models.scoring import MatchOutcome, MatchStatus
from fantasy.utils.bonus_rules import BonusRuleEngine


def outcome(p1_score, p2_score, round_label="Group A", status=MatchStatus.COMPLETED):
    return MatchOutcome(
        match_id=1, round=round_label, player1_id=1, player2_id=2,
        player1_score=p1_score, player2_score=p2_score, status=status,
    )


class TestOutcomeBonuses:
    def test_perfect_game(self):
        result = apply_match_bonuses(outcome(11, 0))
        assert result[1].bonuses == {"winningMatch": 10.0, "perfectGame": 7.5}
        assert result[1].total_points == 28.5
        assert result[2].bonuses == {}
        assert result[2].total_points == 0

    def test_close_win(self):
        result = apply_match_bonuses(outcome(11, 9))
        assert result[1].bonuses == {"winningMatch": 10.0, "closeWin": 5.0}
        assert result[1].total_points == 26
        assert result[2].total_points == 9

    def test_extended_close_win(self):
        assert apply_match_bonuses(outcome(12, 10))[1].total_points == 27

    def test_margin_wider_than_two_is_not_close(self):
        result = apply_match_bonuses(outcome(11, 8))
        assert "closeWin" not in result[1].bonuses
        assert result[1].total_points == 21

    def test_second_player_can_win(self):
        result = apply_match_bonuses(outcome(9, 11))
        assert result[2].bonuses == {"winningMatch": 10.0, "closeWin": 5.0}
        assert result[1].bonuses == {}

    def test_no_win_bonus_before_completion(self):
        result = apply_match_bonuses(outcome(11, 0, status=MatchStatus.IN_PROGRESS))
        assert "winningMatch" not in result[1].bonuses
        assert result[1].total_points == 18.5

    def test_base_points_override(self):
        result = BonusRuleEngine.apply(outcome(11, 9), {1: 50.5})
        assert result[1].base_points == 50.5
        assert result[1].total_points == 65.5
        # Missing players fall back to their raw score
        assert result[2].base_points == 9


class TestKnockoutMultiplier:
    @pytest.mark.parametrize("label, knockout", [
        ("Final", True),
        ("Semi Final", True),
        ("quarterfinal", True),
        ("Group A", False),
        ("Round of 16", False),
        (None, False),
    ])
    def test_knockout_round_detection(self, label, knockout):
        assert BonusRuleEngine.is_knockout_round(label) is knockout

    def test_multiplier_scales_base_and_bonuses(self):
        result = apply_match_bonuses(outcome(11, 9, round_label="Semi Final"))
        assert result[1].knockout_multiplier == 1.5
        assert result[1].total_points == 39
        assert result[2].total_points == 13.5


class TestRoleMultiplier:
    @pytest.mark.parametrize("points", [0, 1, 26, 50.5])
    def test_roles(self, points):
        assert apply_role_multiplier(points, True, False) == 2 * points
        assert apply_role_multiplier(points, False, True) == 1.5 * points
        assert apply_role_multiplier(points, False, False) == points

    def test_captain_takes_precedence(self):
        assert apply_role_multiplier(10, True, True) == 20
