import json
from sqlalchemy import (
    Column, Integer, String, DateTime, Boolean, Text, Float,
    ForeignKey, Enum as SQLEnum, UniqueConstraint, CheckConstraint, Index
)
from sqlalchemy.orm import declarative_base, relationship
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from fantasy.data_models.roster import ContestRules, EditContext, RosterSelection
from fantasy.data_models.scoring import MatchOutcome, MatchStatus, PointsConfig

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp (SQLite drops tzinfo on round trip)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class ContestStatus(Enum):
    UPCOMING = "UPCOMING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @property
    def is_final(self) -> bool:
        return self in (ContestStatus.COMPLETED, ContestStatus.CANCELLED)


class Player(Base):
    __tablename__ = 'players'

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    skill_level = Column(String(20), nullable=True)  # BEGINNER .. PROFESSIONAL
    price = Column(Float, nullable=False, default=0)
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime, default=utcnow)

    def __repr__(self):
        return f"<Player(id={self.id}, name='{self.name}', price={self.price})>"


class Contest(Base):
    __tablename__ = 'contests'

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    tournament_id = Column(Integer, nullable=True, index=True)

    entry_fee = Column(Float, default=0)
    prize_pool = Column(Float, default=0)
    max_entries = Column(Integer, nullable=True)  # None = unlimited
    current_entries = Column(Integer, default=0)
    status = Column(SQLEnum(ContestStatus), default=ContestStatus.UPCOMING, nullable=False)

    # Tournament timing drives the roster edit policy
    tournament_start = Column(DateTime, nullable=False)
    tournament_end = Column(DateTime, nullable=False)

    # Versioned rules JSON, parsed through ContestRules
    rules = Column(Text, nullable=True)
    # Optional PointsConfig overrides (JSON)
    points_config = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow)
    completed_at = Column(DateTime, nullable=True)

    teams = relationship("FantasyTeam", back_populates="contest", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint('current_entries >= 0', name='ck_contest_entries_non_negative'),
    )

    @property
    def parsed_rules(self) -> ContestRules:
        return ContestRules.from_json(self.rules)

    @property
    def parsed_points_config(self) -> PointsConfig:
        return PointsConfig.from_dict(json.loads(self.points_config) if self.points_config else None)

    @property
    def is_full(self) -> bool:
        return self.max_entries is not None and (self.current_entries or 0) >= self.max_entries

    def __repr__(self):
        return f"<Contest(id={self.id}, name='{self.name}', status={self.status.value if self.status else None})>"


class FantasyTeam(Base):
    __tablename__ = 'fantasy_teams'

    id = Column(Integer, primary_key=True)
    contest_id = Column(Integer, ForeignKey('contests.id'), nullable=False, index=True)
    owner_id = Column(Integer, nullable=False, index=True)
    name = Column(String(100), nullable=False)

    # Running total; only the aggregator writes it (compare-and-swap on version)
    total_points = Column(Float, default=0.0, nullable=False)
    budget_spent = Column(Float, default=0.0, nullable=False)
    version = Column(Integer, default=1, nullable=False)

    # Edit history for the edit policy
    last_edited_at = Column(DateTime, nullable=True)
    edit_count = Column(Integer, default=0)  # edits since tournament start
    last_edit_matchday = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    contest = relationship("Contest", back_populates="teams")
    slots = relationship(
        "RosterSlot",
        back_populates="team",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="RosterSlot.id",
    )

    __table_args__ = (
        Index('idx_fantasy_team_contest_points', 'contest_id', 'total_points'),
    )

    def selections(self):
        return tuple(
            RosterSelection(slot.player_id, slot.is_captain, slot.is_vice_captain)
            for slot in self.slots
        )

    def edit_context(self, contest: 'Contest', current_matchday: Optional[int] = None) -> EditContext:
        return EditContext(
            tournament_start=contest.tournament_start,
            tournament_end=contest.tournament_end,
            last_edited_at=self.last_edited_at,
            edit_count_since_start=self.edit_count or 0,
            current_matchday=current_matchday,
            last_edit_matchday=self.last_edit_matchday,
        )

    def __repr__(self):
        return f"<FantasyTeam(id={self.id}, contest={self.contest_id}, points={self.total_points})>"


class RosterSlot(Base):
    __tablename__ = 'roster_slots'

    id = Column(Integer, primary_key=True)
    team_id = Column(Integer, ForeignKey('fantasy_teams.id'), nullable=False, index=True)
    player_id = Column(Integer, ForeignKey('players.id'), nullable=False, index=True)
    is_captain = Column(Boolean, default=False, nullable=False)
    is_vice_captain = Column(Boolean, default=False, nullable=False)

    team = relationship("FantasyTeam", back_populates="slots")

    __table_args__ = (UniqueConstraint('team_id', 'player_id'),)

    def __repr__(self):
        role = "C" if self.is_captain else "VC" if self.is_vice_captain else "-"
        return f"<RosterSlot(team={self.team_id}, player={self.player_id}, role={role})>"


class Match(Base):
    __tablename__ = 'matches'

    id = Column(Integer, primary_key=True)
    tournament_id = Column(Integer, nullable=True, index=True)
    round = Column(String(50), nullable=False, default="Group")
    matchday = Column(Integer, nullable=True)

    player1_id = Column(Integer, ForeignKey('players.id'), nullable=False)
    player2_id = Column(Integer, ForeignKey('players.id'), nullable=False)
    player1_score = Column(Integer, default=0)
    player2_score = Column(Integer, default=0)
    status = Column(SQLEnum(MatchStatus), default=MatchStatus.SCHEDULED, nullable=False)

    scheduled_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)

    def to_outcome(self) -> MatchOutcome:
        return MatchOutcome(
            match_id=self.id,
            round=self.round,
            player1_id=self.player1_id,
            player2_id=self.player2_id,
            player1_score=self.player1_score or 0,
            player2_score=self.player2_score or 0,
            status=self.status,
        )

    def __repr__(self):
        return f"<Match(id={self.id}, round='{self.round}', {self.player1_score}-{self.player2_score})>"


class AppliedScoringEvent(Base):
    """Ledger of scoring events applied to each team (idempotency + reversal)."""
    __tablename__ = 'applied_scoring_events'

    id = Column(Integer, primary_key=True)
    event_key = Column(String(200), nullable=False)
    team_id = Column(Integer, ForeignKey('fantasy_teams.id'), nullable=False, index=True)
    match_id = Column(Integer, nullable=False, index=True)
    event_type = Column(String(30), nullable=False)
    points = Column(Float, nullable=False)  # role-adjusted points this event contributed
    is_reversed = Column(Boolean, default=False, nullable=False)
    applied_at = Column(DateTime, default=utcnow)
    reversed_at = Column(DateTime, nullable=True)

    __table_args__ = (
        UniqueConstraint('event_key', 'team_id', name='uq_scoring_event_team'),
        Index('idx_scoring_event_team_match', 'team_id', 'match_id', 'event_type'),
    )

    def __repr__(self):
        return f"<AppliedScoringEvent(key='{self.event_key}', team={self.team_id}, points={self.points})>"
