"""
Engine-wide constants for the fantasy scoring & settlement engine.

Scoring multipliers, analyst bonus values and prize tiers live here so the
scoring and settlement code never carries magic numbers.
"""

class RoleConstants:
    """Roster role multipliers."""
    
    CAPTAIN_MULTIPLIER = 2.0
    VICE_CAPTAIN_MULTIPLIER = 1.5

class BonusConstants:
    """Match-outcome bonuses layered on top of score-based points."""
    
    WINNING_MATCH_BONUS = 10.0
    PERFECT_GAME_BONUS = 7.5   # 11-0 (or better) shutout
    CLOSE_WIN_BONUS = 5.0      # won by exactly 2 in a long game
    
    PERFECT_GAME_MIN_SCORE = 11
    CLOSE_WIN_MIN_SCORE = 11
    CLOSE_WIN_MIN_OPPONENT_SCORE = 9
    CLOSE_WIN_MARGIN = 2
    
    # Base points per rally point when no shot-level stats are available
    RAW_SCORE_POINT_VALUE = 1.0
    
    KNOCKOUT_MULTIPLIER = 1.5
    KNOCKOUT_ROUND_KEYWORDS = ("final", "semi", "quarter")

class PrizeConstants:
    """Prize tiers by participant count. Percentages are of the prize pool."""
    
    SMALL_CONTEST_LIMIT = 5    # fewer than this: single paid rank
    LARGE_CONTEST_MIN = 30     # this many or more: ten paid ranks
    
    SMALL_CONTEST_PERCENTAGES = (70.0,)
    PODIUM_PERCENTAGES = (40.0, 24.0, 16.0)
    
    # Positions 4..10 split this share evenly in large contests
    DEEP_PAYOUT_SHARE = 20.0
    DEEP_PAYOUT_FIRST_POSITION = 4
    DEEP_PAYOUT_LAST_POSITION = 10

class PaginationConstants:
    """Constants for paginated leaderboards."""
    
    DEFAULT_PAGE_SIZE = 20

class SkillPriceConstants:
    """Default player price per skill category."""
    
    DEFAULT_CATEGORIES = (
        ("A Grade", "PROFESSIONAL", 15000),
        ("B Grade", "ADVANCED", 10000),
        ("C Grade", "INTERMEDIATE", 7000),
        ("D Grade", "BEGINNER", 5000),
    )
