"""
Pickleball fantasy scoring & settlement engine.

Pure scoring, validation and prize functions are importable from the package
root; storage-backed operations live in ``fantasy.services``.
"""

from .utils.multipliers import apply_role_multiplier
from .utils.prizes import calculate_prize_pool, get_prize_breakdown, price_list_from_skill_levels
from .utils.roster_validator import validate_roster, validate_roster_edit
from .utils.scoring import (
    score_match_performance, score_tournament_performance, summarize_tournament_performance
)
from .utils.bonus_rules import apply_match_bonuses

__all__ = [
    'apply_match_bonuses',
    'apply_role_multiplier',
    'calculate_prize_pool',
    'get_prize_breakdown',
    'price_list_from_skill_levels',
    'score_match_performance',
    'score_tournament_performance',
    'summarize_tournament_performance',
    'validate_roster',
    'validate_roster_edit',
]
