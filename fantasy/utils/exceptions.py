"""
Custom exceptions for the scoring & settlement engine with user-friendly error messages.

Every exception carries a technical ``message`` for logs and a ``user_message``
that can be shown to the end user as-is.
"""

class FantasyException(Exception):
    """Base exception for fantasy engine errors."""
    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message

# ---------------------------------------------------------------------------
# Roster validation
# ---------------------------------------------------------------------------

class RosterValidationError(FantasyException):
    """Base class for rejected roster submissions."""
    constraint = "roster"

class InvalidRosterSize(RosterValidationError):
    """Raised when the roster does not have exactly the contest's team size."""
    constraint = "team_size"

    def __init__(self, actual: int, required: int):
        self.actual = actual
        self.required = required
        super().__init__(
            f"Roster has {actual} players, contest requires {required}",
            f"❌ You must select exactly {required} players (you selected {actual})."
        )

class InvalidCaptaincy(RosterValidationError):
    """Raised when captain/vice-captain designation is wrong."""
    constraint = "captaincy"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid captaincy: {reason}", f"❌ {reason}")

class BudgetExceeded(RosterValidationError):
    """Raised when the selected players cost more than the wallet size."""
    constraint = "budget"

    def __init__(self, total_cost: float, wallet_size: float):
        self.total_cost = total_cost
        self.wallet_size = wallet_size
        self.overshoot = total_cost - wallet_size
        super().__init__(
            f"Budget exceeded by {self.overshoot:g} (cost {total_cost:g}, wallet {wallet_size:g})",
            f"❌ Budget exceeded by {self.overshoot:g}. Your wallet is {wallet_size:g}."
        )

class InvalidPlayerSelection(RosterValidationError):
    """Raised when a roster references unknown or duplicated players."""
    constraint = "player_selection"

    def __init__(self, reason: str, player_ids=None):
        self.reason = reason
        self.player_ids = sorted(player_ids or [])
        details = f" {self.player_ids}" if self.player_ids else ""
        super().__init__(f"Invalid player selection: {reason}{details}", f"❌ {reason}")

# ---------------------------------------------------------------------------
# Roster edit policy
# ---------------------------------------------------------------------------

class RosterEditError(FantasyException):
    """Base class for rejected roster edits."""

class EditWindowClosed(RosterEditError):
    """Raised when edits are not allowed at this time (or at all)."""
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Edit window closed: {reason}", f"❌ {reason}")

class EditFrequencyExceeded(RosterEditError):
    """Raised when the contest's change frequency has been used up."""
    def __init__(self, frequency: str):
        self.frequency = frequency
        messages = {
            'once': "You can only change your team once during the tournament",
            'daily': "You have already changed your team today",
            'matchday': "You have already changed your team this matchday",
        }
        reason = messages.get(frequency, f"Change limit reached ({frequency})")
        super().__init__(f"Edit frequency exceeded ({frequency})", f"❌ {reason}")

class TooManyPlayersChanged(RosterEditError):
    """Raised when an edit swaps more players than the contest allows."""
    def __init__(self, changed: int, allowed: int):
        self.changed = changed
        self.allowed = allowed
        super().__init__(
            f"Edit changes {changed} players, limit is {allowed}",
            f"❌ You can only change up to {allowed} players at a time."
        )

# ---------------------------------------------------------------------------
# Missing references
# ---------------------------------------------------------------------------

class NotFoundError(FantasyException):
    """Base class for missing-reference errors from the storage boundary."""
    entity = "Entity"

    def __init__(self, entity_id):
        self.entity_id = entity_id
        super().__init__(
            f"{self.entity} {entity_id} not found",
            f"❌ {self.entity} not found!"
        )

class MatchNotFound(NotFoundError):
    entity = "Match"

class TeamNotFound(NotFoundError):
    entity = "Team"

class ContestNotFound(NotFoundError):
    entity = "Contest"

# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

class DuplicateEventIgnored(FantasyException):
    """Raised inside the aggregator when an event key was already applied to a team.

    Not a failure: the aggregator catches it and reports success.
    """
    def __init__(self, event_key: str, team_id: int):
        self.event_key = event_key
        self.team_id = team_id
        super().__init__(f"Event '{event_key}' already applied to team {team_id}")

class ConcurrentUpdateError(FantasyException):
    """Raised when a team's compare-and-swap update loses to a concurrent writer."""
    def __init__(self, team_id: int, expected_version: int):
        self.team_id = team_id
        self.expected_version = expected_version
        super().__init__(f"Team {team_id} changed concurrently (expected version {expected_version})")

class TransactionError(FantasyException):
    """Raised when transaction operations fail after retries."""
    def __init__(self, operation: str, attempts: int):
        super().__init__(
            f"Transaction failed for {operation} after {attempts} attempts",
            "❌ Failed to update points. Please try again."
        )

class ContestStateError(FantasyException):
    """Raised when a contest is in the wrong status for an operation."""
    def __init__(self, contest_id: int, status: str, operation: str):
        self.contest_id = contest_id
        self.status = status
        super().__init__(
            f"Cannot {operation} contest {contest_id} in status {status}",
            f"❌ This contest is {status.lower().replace('_', ' ')}."
        )

class InvalidRulesError(FantasyException):
    """Raised when contest rules or a points config cannot be parsed."""
    def __init__(self, reason: str):
        super().__init__(f"Invalid rules: {reason}", "❌ Contest configuration is invalid.")
