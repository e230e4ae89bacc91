"""
Services package for the fantasy scoring & settlement engine.
"""

from .base import BaseService
from .leaderboard import LeaderboardService
from .match_scoring import MatchScoringService
from .roster import RosterService
from .settlement import SettlementService
from .team_aggregator import TeamAggregatorService

__all__ = [
    'BaseService',
    'LeaderboardService',
    'MatchScoringService',
    'RosterService',
    'SettlementService',
    'TeamAggregatorService',
]
