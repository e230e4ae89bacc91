from fantasy.constants import RoleConstants

def apply_role_multiplier(points: float, is_captain: bool, is_vice_captain: bool) -> float:
    """
    Scale a player's points by their roster role
    
    Captain doubles, vice-captain gets 1.5x, everyone else is unchanged. Roster
    validation guarantees at most one role per slot; captain wins if both are set.
    """
    if is_captain:
        return points * RoleConstants.CAPTAIN_MULTIPLIER
    if is_vice_captain:
        return points * RoleConstants.VICE_CAPTAIN_MULTIPLIER
    return points
