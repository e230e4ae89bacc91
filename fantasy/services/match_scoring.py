"""
Match scoring pipeline: match-feed records into scoring events.

Completed matches are scored with the points table, layered with the outcome
bonuses and handed to the team aggregator as MATCH_COMPLETION events. Live
rally points become PARTIAL_UPDATE events. Event keys are deterministic so a
re-delivered record maps onto the same key and is ignored downstream.
"""

import logging
from typing import Iterable, Optional

from fantasy.data_models.events import EventApplication, ScoringEvent, ScoringEventType
from fantasy.data_models.scoring import (
    DEFAULT_POINTS_CONFIG, MatchOutcome, MatchPerformance, MatchStatus, PointsConfig
)
from fantasy.database.repositories import ContestRepository, MatchRepository
from fantasy.services.base import BaseService
from fantasy.utils.bonus_rules import BonusRuleEngine
from fantasy.utils.scoring import PerformanceScorer

logger = logging.getLogger(__name__)


class MatchScoringService(BaseService):
    """Builds scoring events from match results and forwards them to the aggregator."""

    def __init__(self, session_factory, aggregator, match_repository: Optional[MatchRepository] = None,
                 contest_repository: Optional[ContestRepository] = None):
        super().__init__(session_factory)
        self.aggregator = aggregator
        self.matches = match_repository or MatchRepository()
        self.contests = contest_repository or ContestRepository()

    @staticmethod
    def completion_event_key(outcome: MatchOutcome) -> str:
        # The final score is part of the key: a corrected result is a new event
        return (f"match:{outcome.match_id}:completion:"
                f"{outcome.player1_score}-{outcome.player2_score}")

    @staticmethod
    def point_event_key(match_id: int, sequence: int) -> str:
        return f"match:{match_id}:point:{sequence}"

    @staticmethod
    def score_completed_match(outcome: MatchOutcome,
                              performances: Optional[Iterable[MatchPerformance]] = None,
                              config: PointsConfig = DEFAULT_POINTS_CONFIG,
                              contest_id: Optional[int] = None,
                              tournament_id: Optional[int] = None) -> ScoringEvent:
        """
        Turn a final match record into a MATCH_COMPLETION event.

        Players with a recorded performance get their points-table score as
        base points; anyone else falls back to the raw score.
        """
        base_points = PerformanceScorer.score_matches(performances or (), config)
        breakdown = BonusRuleEngine.apply(outcome, base_points)
        return ScoringEvent(
            event_key=MatchScoringService.completion_event_key(outcome),
            match_id=outcome.match_id,
            event_type=ScoringEventType.MATCH_COMPLETION,
            player_points={player_id: points.total_points for player_id, points in breakdown.items()},
            contest_id=contest_id,
            tournament_id=tournament_id,
        )

    @staticmethod
    def score_point_update(match_id: int,
                           player_ids: Iterable[int],
                           sequence: int,
                           points: float = 1.0,
                           contest_id: Optional[int] = None,
                           tournament_id: Optional[int] = None) -> ScoringEvent:
        """A live rally point for the given players as a PARTIAL_UPDATE event."""
        return ScoringEvent(
            event_key=MatchScoringService.point_event_key(match_id, sequence),
            match_id=match_id,
            event_type=ScoringEventType.PARTIAL_UPDATE,
            player_points={player_id: points for player_id in player_ids},
            contest_id=contest_id,
            tournament_id=tournament_id,
        )

    async def process_match_result(self,
                                   match_id: int,
                                   performances: Optional[Iterable[MatchPerformance]] = None,
                                   contest_id: Optional[int] = None) -> EventApplication:
        """
        Score a stored match and apply it to the teams of its tournament.

        Only in-progress contests built on the match's tournament are scored,
        each with its own points table, so the same match can be worth
        different points in different contests.

        Raises:
            MatchNotFound: Unknown match
        """
        performances = list(performances or ())
        async with self.get_session() as session:
            match = await self.matches.get(session, match_id)
            outcome = match.to_outcome()
            tournament_id = match.tournament_id
            contests = []
            if tournament_id is not None:
                contests = [
                    (contest.id, contest.parsed_points_config)
                    for contest in await self.contests.list_scoring(session, tournament_id, contest_id)
                ]

        if not outcome.is_completed:
            logger.warning(f"Match {match_id} is {outcome.status.value}; scoring without the win bonus")
        if not contests:
            logger.info(f"Match {match_id}: no in-progress contest on tournament {tournament_id}")

        deltas = []
        for scoring_contest_id, config in contests:
            event = self.score_completed_match(outcome, performances, config, scoring_contest_id,
                                               tournament_id)
            application = await self.aggregator.apply_match_event(event)
            deltas.extend(application.deltas)

        return EventApplication(event_key=self.completion_event_key(outcome), match_id=match_id,
                                deltas=deltas)

    async def record_match_result(self,
                                  match_id: int,
                                  player1_score: int,
                                  player2_score: int,
                                  status: MatchStatus = MatchStatus.COMPLETED,
                                  performances: Optional[Iterable[MatchPerformance]] = None
                                  ) -> EventApplication:
        """Store a reported (or corrected) score, then score the match."""
        async with self.get_session() as session:
            await self.matches.record_result(session, match_id, player1_score, player2_score, status)
        logger.info(f"Match {match_id} recorded as {player1_score}-{player2_score} ({status.value})")
        return await self.process_match_result(match_id, performances)
