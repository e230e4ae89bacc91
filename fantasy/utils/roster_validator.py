"""
Roster validation for fantasy team construction and edits.

Pure checks with no storage access. A roster is checked, in order, for size,
captaincy, budget and player selection; the first violated constraint is
raised. Edits additionally go through the contest's edit policy.
"""

from collections import Counter
from datetime import datetime
from typing import Iterable, Mapping, Sequence

from fantasy.data_models.roster import (
    ChangeFrequency, ContestRules, EditContext, Roster, RosterSelection
)
from fantasy.utils.exceptions import (
    BudgetExceeded, EditFrequencyExceeded, EditWindowClosed, InvalidCaptaincy,
    InvalidPlayerSelection, InvalidRosterSize, TooManyPlayersChanged
)


def _check_size(selection: Sequence[RosterSelection], rules: ContestRules) -> None:
    if len(selection) != rules.team_size:
        raise InvalidRosterSize(len(selection), rules.team_size)


def _check_captaincy(selection: Sequence[RosterSelection]) -> None:
    captains = [slot for slot in selection if slot.is_captain]
    vice_captains = [slot for slot in selection if slot.is_vice_captain]

    if len(captains) != 1:
        raise InvalidCaptaincy("You must select exactly one captain")
    if len(vice_captains) != 1:
        raise InvalidCaptaincy("You must select exactly one vice-captain")
    if captains[0].player_id == vice_captains[0].player_id:
        raise InvalidCaptaincy("Captain and vice-captain must be different players")


def _roster_cost(selection: Sequence[RosterSelection], prices: Mapping[int, float]) -> float:
    # Unknown players cost nothing here; the selection check rejects them next
    return sum(prices.get(slot.player_id, 0) for slot in selection)


def _check_budget(total_cost: float, rules: ContestRules) -> None:
    if total_cost > rules.wallet_size:
        raise BudgetExceeded(total_cost, rules.wallet_size)


def _check_players(selection: Sequence[RosterSelection], prices: Mapping[int, float]) -> None:
    unknown = {slot.player_id for slot in selection if slot.player_id not in prices}
    if unknown:
        raise InvalidPlayerSelection("Some selected players are not available in this contest", unknown)

    counts = Counter(slot.player_id for slot in selection)
    duplicates = {player_id for player_id, count in counts.items() if count > 1}
    if duplicates:
        raise InvalidPlayerSelection("Each player can only be selected once", duplicates)


def validate_roster(selection: Iterable[RosterSelection],
                    rules: ContestRules,
                    prices: Mapping[int, float]) -> Roster:
    """
    Validate a proposed fantasy roster.

    Args:
        selection: Proposed picks with captain/vice-captain flags
        rules: Contest rules (team size, wallet size)
        prices: Player price list for the contest

    Returns:
        The accepted roster with its total cost

    Raises:
        InvalidRosterSize, InvalidCaptaincy, BudgetExceeded, InvalidPlayerSelection
    """
    selection = tuple(selection)

    _check_size(selection, rules)
    _check_captaincy(selection)
    total_cost = _roster_cost(selection, prices)
    _check_budget(total_cost, rules)
    _check_players(selection, prices)

    return Roster(slots=selection, budget_spent=total_cost)


def count_changed_players(current: Iterable[RosterSelection], proposed: Iterable[RosterSelection]) -> int:
    """Number of players swapped out. Captaincy changes alone do not count."""
    current_ids = {slot.player_id for slot in current}
    proposed_ids = {slot.player_id for slot in proposed}
    return len(current_ids - proposed_ids)


def _within_window(now: datetime, rules: ContestRules) -> bool:
    time_string = now.strftime('%H:%M')
    return rules.change_window_start <= time_string <= rules.change_window_end


def check_edit_policy(current: Sequence[RosterSelection],
                      proposed: Sequence[RosterSelection],
                      rules: ContestRules,
                      context: EditContext,
                      now: datetime) -> None:
    """
    Apply the contest's edit policy to a roster change.

    Before the tournament starts any edit is allowed (if the contest allows
    changes at all). After it ends nothing is. In between, the edit must fall
    inside the daily window, respect the change frequency and swap no more
    than ``max_players_to_change`` players.
    """
    if not rules.allow_team_changes:
        raise EditWindowClosed("Team changes are not allowed for this contest")

    if now > context.tournament_end:
        raise EditWindowClosed("Tournament has ended. Team changes are not allowed")

    if now < context.tournament_start:
        return

    if rules.has_change_window and not _within_window(now, rules):
        raise EditWindowClosed(
            f"Team changes are only allowed between {rules.change_window_start} and {rules.change_window_end}"
        )

    edited_since_start = (
        context.edit_count_since_start > 0
        and context.last_edited_at is not None
        and context.last_edited_at >= context.tournament_start
    )
    if edited_since_start:
        frequency = rules.change_frequency
        if frequency == ChangeFrequency.ONCE:
            raise EditFrequencyExceeded(frequency.value)
        if frequency == ChangeFrequency.DAILY and context.last_edit_day() == now.date():
            raise EditFrequencyExceeded(frequency.value)
        if (frequency == ChangeFrequency.MATCHDAY
                and context.current_matchday is not None
                and context.last_edit_matchday == context.current_matchday):
            raise EditFrequencyExceeded(frequency.value)

    changed = count_changed_players(current, proposed)
    if changed > rules.max_players_to_change:
        raise TooManyPlayersChanged(changed, rules.max_players_to_change)


def validate_roster_edit(current: Iterable[RosterSelection],
                         proposed: Iterable[RosterSelection],
                         rules: ContestRules,
                         prices: Mapping[int, float],
                         context: EditContext,
                         now: datetime) -> Roster:
    """
    Validate a roster edit: edit policy first, then the full roster checks
    against the post-edit roster.
    """
    current = tuple(current)
    proposed = tuple(proposed)
    check_edit_policy(current, proposed, rules, context, now)
    return validate_roster(proposed, rules, prices)
