"""
Match-outcome bonus rules.

Analyst bonuses evaluated on the raw final scores of a two-sided match and
layered on top of a player's base match points:

- winning the completed match
- a perfect game (11+ to 0)
- a close win (by exactly 2, at 11+, with the loser on 9+)

Knockout rounds then scale base points plus bonuses by 1.5.
"""

from typing import Dict, Mapping, Optional

from fantasy.constants import BonusConstants
from fantasy.data_models.scoring import MatchOutcome, PlayerMatchPoints


class BonusRuleEngine:
    """Applies match-outcome bonuses and the knockout multiplier."""

    @staticmethod
    def is_knockout_round(round_label: Optional[str]) -> bool:
        if not round_label:
            return False
        label = round_label.lower()
        return any(keyword in label for keyword in BonusConstants.KNOCKOUT_ROUND_KEYWORDS)

    @staticmethod
    def knockout_multiplier(round_label: Optional[str]) -> float:
        if BonusRuleEngine.is_knockout_round(round_label):
            return BonusConstants.KNOCKOUT_MULTIPLIER
        return 1.0

    @staticmethod
    def side_bonuses(own_score: int, opponent_score: int, match_completed: bool) -> Dict[str, float]:
        """Bonuses earned by one side given both final scores."""
        bonuses: Dict[str, float] = {}

        if match_completed and own_score > opponent_score:
            bonuses['winningMatch'] = BonusConstants.WINNING_MATCH_BONUS

        if own_score >= BonusConstants.PERFECT_GAME_MIN_SCORE and opponent_score == 0:
            bonuses['perfectGame'] = BonusConstants.PERFECT_GAME_BONUS

        if (own_score >= BonusConstants.CLOSE_WIN_MIN_SCORE
                and own_score == opponent_score + BonusConstants.CLOSE_WIN_MARGIN
                and opponent_score >= BonusConstants.CLOSE_WIN_MIN_OPPONENT_SCORE):
            bonuses['closeWin'] = BonusConstants.CLOSE_WIN_BONUS

        return bonuses

    @staticmethod
    def apply(outcome: MatchOutcome,
              base_points: Optional[Mapping[int, float]] = None) -> Dict[int, PlayerMatchPoints]:
        """
        Compute bonus-adjusted match points for both sides.

        Args:
            outcome: Final scores, round label and status of the match
            base_points: Base points per player id. Players missing from the
                mapping (or all players, when omitted) fall back to their raw
                score at one point per rally point.

        Returns:
            Dict mapping player id to the player's points breakdown
        """
        base_points = base_points or {}
        multiplier = BonusRuleEngine.knockout_multiplier(outcome.round)
        sides = (
            (outcome.player1_id, outcome.player1_score, outcome.player2_score),
            (outcome.player2_id, outcome.player2_score, outcome.player1_score),
        )

        results: Dict[int, PlayerMatchPoints] = {}
        for player_id, own_score, opponent_score in sides:
            base = base_points.get(player_id)
            if base is None:
                base = own_score * BonusConstants.RAW_SCORE_POINT_VALUE
            bonuses = BonusRuleEngine.side_bonuses(own_score, opponent_score, outcome.is_completed)
            total = (base + sum(bonuses.values())) * multiplier
            results[player_id] = PlayerMatchPoints(
                player_id=player_id,
                base_points=base,
                bonuses=bonuses,
                knockout_multiplier=multiplier,
                total_points=total,
            )
        return results


apply_match_bonuses = BonusRuleEngine.apply
