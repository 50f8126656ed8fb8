"""
Round Plan Engine — Single source of truth for round structure edits.

This module owns the plan value types and every reducer that produces a new
plan from an old one:
1. new_plan: a plan seeded with one default round
2. derive_group_counts: group counts of every round from the advancement chain
3. add_round / remove_round / update_round / update_plan: editing reducers

Reducers never mutate their input. Every reducer except derive_group_counts
ends with a derive pass, so group counts are always consistent with the
chain (but the plan is not validated; see plan_validation.py).
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Optional, Tuple

from app.config import (
    DEFAULT_ADVANCING_PLAYERS,
    DEFAULT_GROUP_PHASE_SIZE,
    DEFAULT_GROUP_SIZE,
)
from app.services.round_plan_rules import (
    FALLBACK_ADVANCING_PLAYERS,
    FALLBACK_CONCURRENT_GROUPS,
    MIN_ADVANCING_PLAYERS,
    MIN_CONCURRENT_GROUPS,
    MIN_GROUP_SIZE,
    group_phase_group_count,
    groups_needed,
    round_name,
    round_robin_matches,
)

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Data Models
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class RoundSpec:
    """One post-group-phase round: equally sized groups, top N advance."""
    name: str
    players_per_group: int
    group_count: int = 1                # Derived; overwritten on every derive pass
    matches_per_group: int = 0
    advancing_players_per_group: int = 1
    concurrent_groups: int = 1


@dataclass(frozen=True)
class TournamentPlan:
    """Canonical input for round structure calculations."""
    player_count: int
    rounds: Tuple[RoundSpec, ...] = field(default_factory=tuple)
    name: str = ""
    description: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    group_phase_enabled: bool = False
    group_phase_size: int = DEFAULT_GROUP_PHASE_SIZE
    allow_underfilled_groups: bool = False

    @property
    def last_round(self) -> Optional[RoundSpec]:
        return self.rounds[-1] if self.rounds else None


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

def default_round(round_number: int = 1) -> RoundSpec:
    """Build the round a fresh plan starts with."""
    return RoundSpec(
        name=round_name(round_number),
        players_per_group=DEFAULT_GROUP_SIZE,
        group_count=1,
        matches_per_group=round_robin_matches(DEFAULT_GROUP_SIZE),
        advancing_players_per_group=DEFAULT_ADVANCING_PLAYERS,
        concurrent_groups=1,
    )


def players_entering_first_round(plan: TournamentPlan) -> int:
    """
    Players entering round 0.

    With a group phase, the group phase winners enter: each group-phase group
    sends round 0's advancing count forward. Without one, everybody enters.
    """
    if not plan.group_phase_enabled:
        return plan.player_count
    advancing = plan.rounds[0].advancing_players_per_group if plan.rounds else 0
    return group_phase_group_count(plan.player_count, plan.group_phase_size) * advancing


def total_rounds(plan: TournamentPlan) -> int:
    return len(plan.rounds)


def total_matches(plan: TournamentPlan) -> int:
    """Total matches across every group of every phase, group phase included."""
    total = sum(r.group_count * r.matches_per_group for r in plan.rounds)
    if plan.group_phase_enabled and plan.player_count > 0:
        groups = group_phase_group_count(plan.player_count, plan.group_phase_size)
        total += groups * round_robin_matches(plan.group_phase_size)
    return total


# -----------------------------------------------------------------------------
# Reducers
# -----------------------------------------------------------------------------

def new_plan(player_count: int = 0, **plan_fields) -> TournamentPlan:
    """Create a plan with a single default round and derive its group count."""
    plan = TournamentPlan(player_count=player_count, rounds=(default_round(1),), **plan_fields)
    return derive_group_counts(plan)


def derive_group_counts(plan: TournamentPlan) -> TournamentPlan:
    """
    Recompute group_count for every round from the advancement chain.

    Round i > 0 is fed by the just-derived group count of round i-1 times its
    advancing count. Group counts depend only on player_count, the group phase
    settings and each round's size/advancing values, so applying this twice
    gives the same plan as applying it once.
    """
    if plan.player_count <= 0:
        return plan

    entering = players_entering_first_round(plan)
    derived = []
    for index, round_spec in enumerate(plan.rounds):
        if index > 0:
            prev = derived[index - 1]
            entering = prev.group_count * prev.advancing_players_per_group
        group_count = groups_needed(entering, round_spec.players_per_group)
        derived.append(replace(round_spec, group_count=group_count))

    return replace(plan, rounds=tuple(derived))


def add_round(plan: TournamentPlan) -> TournamentPlan:
    """
    Append a round seeded from the last one.

    Group size doubles the last advancing count, advancing halves it (kept
    strictly below the new group size), concurrency halves.
    """
    last = plan.last_round
    last_advancing = (last.advancing_players_per_group if last else 0) or FALLBACK_ADVANCING_PLAYERS
    last_concurrent = (last.concurrent_groups if last else 0) or FALLBACK_CONCURRENT_GROUPS

    players_per_group = max(MIN_GROUP_SIZE, last_advancing * 2)
    advancing = min(players_per_group - 1, max(MIN_ADVANCING_PLAYERS, last_advancing // 2))

    new_round = RoundSpec(
        name=round_name(len(plan.rounds) + 1),
        players_per_group=players_per_group,
        group_count=1,
        matches_per_group=round_robin_matches(players_per_group),
        advancing_players_per_group=advancing,
        concurrent_groups=max(MIN_CONCURRENT_GROUPS, last_concurrent // 2),
    )
    logger.debug(
        "Appending %s: %d per group, %d advancing",
        new_round.name, players_per_group, advancing,
    )
    return derive_group_counts(replace(plan, rounds=plan.rounds + (new_round,)))


def remove_round(plan: TournamentPlan, index: int) -> TournamentPlan:
    """
    Remove the round at index while more than one round remains.

    Removing the only round, or an index outside the plan, returns the plan
    unchanged. Callers wanting confirmation check the round count first.
    """
    if len(plan.rounds) <= 1 or not 0 <= index < len(plan.rounds):
        return plan
    rounds = plan.rounds[:index] + plan.rounds[index + 1:]
    logger.debug("Removed round %d (%s)", index, plan.rounds[index].name)
    return derive_group_counts(replace(plan, rounds=rounds))


def update_round(plan: TournamentPlan, index: int, **changes) -> TournamentPlan:
    """
    Replace fields of the round at index and re-derive group counts.

    A new group size reseeds matches_per_group only while the round still
    holds the round-robin default for its old size; manual overrides stick.
    An index outside the plan returns the plan unchanged, like remove_round.
    Unknown field names raise TypeError.
    """
    if not 0 <= index < len(plan.rounds):
        return plan
    current = plan.rounds[index]
    if "players_per_group" in changes and "matches_per_group" not in changes:
        if current.matches_per_group == round_robin_matches(current.players_per_group):
            changes["matches_per_group"] = round_robin_matches(changes["players_per_group"])

    updated = replace(current, **changes)
    rounds = plan.rounds[:index] + (updated,) + plan.rounds[index + 1:]
    return derive_group_counts(replace(plan, rounds=rounds))


def update_plan(plan: TournamentPlan, **changes) -> TournamentPlan:
    """Replace top-level plan fields (player count, group phase, names, dates) and re-derive."""
    if "rounds" in changes:
        changes["rounds"] = tuple(changes["rounds"])
    return derive_group_counts(replace(plan, **changes))
