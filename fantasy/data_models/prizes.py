"""
Prize data models.
"""

from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class PrizeEntry:
    """Prize for one paid position."""
    position: int
    percentage: float
    amount: float


@dataclass(frozen=True)
class PrizeBreakdown:
    """Prize split of a pool across paid positions. Unlisted positions receive nothing."""
    prize_pool: float
    participant_count: int
    entries: List[PrizeEntry]

    @property
    def total_percentage(self) -> float:
        return sum(entry.percentage for entry in self.entries)

    @property
    def total_amount(self) -> float:
        return sum(entry.amount for entry in self.entries)

    @property
    def paid_positions(self) -> int:
        return len(self.entries)

    def for_position(self, position: int) -> Optional[PrizeEntry]:
        for entry in self.entries:
            if entry.position == position:
                return entry
        return None


@dataclass(frozen=True)
class Payout:
    """Payout instruction for one team at settlement. Execution is done elsewhere."""
    team_id: int
    owner_id: int
    rank: int
    total_points: float
    percentage: float
    amount: float


@dataclass(frozen=True)
class SettlementResult:
    """Outcome of settling a contest."""
    contest_id: int
    prize_pool: float
    participant_count: int
    payouts: List[Payout]

    @property
    def total_paid(self) -> float:
        return sum(payout.amount for payout in self.payouts)
