"""
Round Plan Rules — Sizing constants and counting helpers (Single Source of Truth)

This module defines the numeric rules shared by the round plan engine,
validator and phase projection. All other modules must import from here.
Do NOT duplicate these rules elsewhere.
"""

# =============================================================================
# Bounds
# =============================================================================

MIN_GROUP_SIZE = 2
MIN_GROUP_COUNT = 1
MIN_ADVANCING_PLAYERS = 1
MIN_CONCURRENT_GROUPS = 1
MAX_NAME_LENGTH = 255

# Seeds used by add_round when the last round carries no usable value
FALLBACK_ADVANCING_PLAYERS = 2
FALLBACK_CONCURRENT_GROUPS = 1

GROUP_PHASE_NAME = "Group Phase"


# =============================================================================
# Counting Helpers
# =============================================================================

def round_robin_matches(players: int) -> int:
    """Return number of RR matches in a group: C(n, 2) = n*(n-1)/2, 0 for n <= 1."""
    if players <= 1:
        return 0
    return (players * (players - 1)) // 2


def ceil_div(numerator: int, denominator: int) -> int:
    """Integer ceiling division for non-negative numerators."""
    return -(-numerator // denominator)


def groups_needed(entering_players: int, players_per_group: int) -> int:
    """
    Return the number of groups needed to seat entering_players.

    Group size is floored at MIN_GROUP_SIZE so a malformed round never
    divides by zero, and at least one group is always returned.
    """
    size = max(MIN_GROUP_SIZE, players_per_group)
    return max(MIN_GROUP_COUNT, ceil_div(max(0, entering_players), size))


def group_phase_group_count(player_count: int, group_phase_size: int) -> int:
    """Return number of groups in the group phase: ceil(players / size)."""
    size = max(MIN_GROUP_SIZE, group_phase_size)
    return ceil_div(max(0, player_count), size)


def round_name(round_number: int) -> str:
    """Default display name for the 1-based round number."""
    return f"Round {round_number}"
