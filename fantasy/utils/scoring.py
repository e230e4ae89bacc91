from typing import Dict, Iterable, Optional

from fantasy.data_models.scoring import (
    DEFAULT_POINTS_CONFIG, MatchPerformance, PerformanceSummary, PointsConfig, TournamentPerformance
)

class PerformanceScorer:
    """Converts recorded player performances into fantasy points"""

    @staticmethod
    def score_match(performance: MatchPerformance, config: PointsConfig = DEFAULT_POINTS_CONFIG) -> float:
        """
        Calculate fantasy points for a single match performance

        Args:
            performance: The player's recorded stats for the match
            config: Points table to score with

        Returns:
            Match points, never below 0
        """
        points = config.match_win if performance.is_match_winner else config.match_loss

        points += performance.sets_won * config.set_win

        points += performance.points_scored * config.point_won
        points += performance.points_conceded * config.point_lost

        points += performance.winners * config.winner_shot
        points += performance.aces * config.ace
        points += performance.errors * config.error
        points += performance.faults * config.fault

        points += performance.rallies_won * config.rally_won

        # A single bad match cannot cost points
        return max(0.0, points)

    @staticmethod
    def position_bonus(position: Optional[int], config: PointsConfig = DEFAULT_POINTS_CONFIG) -> float:
        """
        Get the tournament finishing-position bonus

        Args:
            position: Final tournament position (1 = winner), or None
            config: Points table to score with

        Returns:
            Bonus points (0 beyond 8th place or when unknown)
        """
        if position is None:
            return 0.0
        if position == 1:
            return config.tournament_winner
        if position == 2:
            return config.tournament_runner_up
        if 3 <= position <= 4:
            return config.tournament_semi_final
        if 5 <= position <= 8:
            return config.tournament_quarter_final
        return 0.0

    @staticmethod
    def score_tournament(performance: TournamentPerformance,
                         config: PointsConfig = DEFAULT_POINTS_CONFIG) -> float:
        """
        Calculate fantasy points for a player's whole tournament

        Each match is clamped on its own; the position bonus is added afterwards.
        """
        match_points = sum(PerformanceScorer.score_match(match, config) for match in performance.matches)
        return match_points + PerformanceScorer.position_bonus(performance.tournament_position, config)

    @staticmethod
    def score_matches(performances: Iterable[MatchPerformance],
                      config: PointsConfig = DEFAULT_POINTS_CONFIG) -> Dict[int, float]:
        """Score several performances from the same match, keyed by player id"""
        return {p.player_id: PerformanceScorer.score_match(p, config) for p in performances}

    @staticmethod
    def summarize(performance: TournamentPerformance,
                  config: PointsConfig = DEFAULT_POINTS_CONFIG) -> PerformanceSummary:
        """Build a display summary of a player's tournament"""
        matches = performance.matches
        matches_played = len(matches)
        matches_won = sum(1 for m in matches if m.is_match_winner)
        sets_won = sum(m.sets_won for m in matches)

        best_match_id = None
        best_match_points = None
        for match in matches:
            points = PerformanceScorer.score_match(match, config)
            # First match wins ties
            if best_match_points is None or points > best_match_points:
                best_match_id = match.match_id
                best_match_points = points

        return PerformanceSummary(
            player_id=performance.player_id,
            total_points=PerformanceScorer.score_tournament(performance, config),
            matches_played=matches_played,
            matches_won=matches_won,
            sets_won=sets_won,
            win_rate=(matches_won / matches_played) * 100 if matches_played else 0.0,
            best_match_id=best_match_id,
            best_match_points=best_match_points,
        )


score_match_performance = PerformanceScorer.score_match
score_tournament_performance = PerformanceScorer.score_tournament
summarize_tournament_performance = PerformanceScorer.summarize
