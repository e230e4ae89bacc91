"""
Prize pool utilities.

Tiered prize split by participant count, the dynamic prize pool collected from
entry fees, and player pricing from skill categories.
"""

from typing import Iterable, List, Mapping, Optional, Tuple

from fantasy.config import Config
from fantasy.constants import PrizeConstants, SkillPriceConstants
from fantasy.data_models.prizes import PrizeBreakdown, PrizeEntry


def prize_percentages(participant_count: int) -> List[Tuple[int, float]]:
    """
    Get the (position, percentage) split for a contest size

    Args:
        participant_count: Number of teams in the contest

    Returns:
        Paid positions in order, with their share of the prize pool
    """
    if participant_count < 1:
        raise ValueError("participant_count must be at least 1")

    if participant_count < PrizeConstants.SMALL_CONTEST_LIMIT:
        shares = list(PrizeConstants.SMALL_CONTEST_PERCENTAGES)
    elif participant_count < PrizeConstants.LARGE_CONTEST_MIN:
        shares = list(PrizeConstants.PODIUM_PERCENTAGES)
    else:
        shares = list(PrizeConstants.PODIUM_PERCENTAGES)
        deep_positions = (PrizeConstants.DEEP_PAYOUT_LAST_POSITION
                          - PrizeConstants.DEEP_PAYOUT_FIRST_POSITION + 1)
        shares.extend([PrizeConstants.DEEP_PAYOUT_SHARE / deep_positions] * deep_positions)

    return [(position, share) for position, share in enumerate(shares, start=1)]


def get_prize_breakdown(prize_pool: float, participant_count: int) -> PrizeBreakdown:
    """
    Split a prize pool across paid positions

    Args:
        prize_pool: Total prize pool
        participant_count: Number of teams in the contest

    Returns:
        PrizeBreakdown with amount = prize_pool * percentage / 100 per position
    """
    if prize_pool < 0:
        raise ValueError("prize_pool cannot be negative")

    entries = [
        PrizeEntry(position=position, percentage=percentage, amount=prize_pool * percentage / 100)
        for position, percentage in prize_percentages(participant_count)
    ]
    return PrizeBreakdown(prize_pool=prize_pool, participant_count=participant_count, entries=entries)


def calculate_prize_pool(entry_fee: float, entries: int, percentage: Optional[float] = None) -> float:
    """
    Calculate the dynamic prize pool from collected entry fees

    Args:
        entry_fee: Fee paid per team
        entries: Number of teams that paid
        percentage: Share of fees going to the pool (defaults to Config.PRIZE_POOL_PERCENTAGE)
    """
    if entry_fee < 0 or entries < 0:
        raise ValueError("entry_fee and entries cannot be negative")
    if percentage is None:
        percentage = Config.PRIZE_POOL_PERCENTAGE
    return entry_fee * entries * percentage / 100


def price_list_from_skill_levels(
    players: Mapping[int, str],
    categories: Optional[Iterable[Tuple[str, str, float]]] = None,
) -> dict:
    """
    Derive a player price list from skill categories

    Args:
        players: player_id -> skill level (e.g. "ADVANCED")
        categories: (name, skill level, price) triples; defaults to the A-D grades

    Returns:
        player_id -> price. Players whose skill level has no category are left out.
    """
    if categories is None:
        categories = SkillPriceConstants.DEFAULT_CATEGORIES
    price_by_level = {level.upper(): float(price) for _, level, price in categories}
    return {
        player_id: price_by_level[level.upper()]
        for player_id, level in players.items()
        if level and level.upper() in price_by_level
    }

