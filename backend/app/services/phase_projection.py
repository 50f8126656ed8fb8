"""
Phase projection: read-only display summary of a round plan.

Turns a plan into one PhaseSummary per phase (optional group phase, then each
round) for live preview. Never validates and never mutates, so it is safe to
call on a partially invalid plan while it is being edited.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, List

from app.services.round_plan_engine import TournamentPlan
from app.services.round_plan_rules import (
    GROUP_PHASE_NAME,
    group_phase_group_count,
    round_robin_matches,
)


@dataclass(frozen=True)
class PhaseSummary:
    name: str
    group_count: int
    players_per_group: int
    total_players: int          # Players entering the phase
    advancing_players: int      # Players leaving it; 1 for the final round
    matches_per_group: int
    advancing_players_per_group: int
    concurrent_groups: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _group_phase_summary(plan: TournamentPlan) -> PhaseSummary:
    group_count = group_phase_group_count(plan.player_count, plan.group_phase_size)
    advancing_per_group = plan.rounds[0].advancing_players_per_group if plan.rounds else 0
    return PhaseSummary(
        name=GROUP_PHASE_NAME,
        group_count=group_count,
        players_per_group=plan.group_phase_size,
        total_players=plan.player_count,
        advancing_players=group_count * advancing_per_group,
        matches_per_group=round_robin_matches(plan.group_phase_size),
        advancing_players_per_group=advancing_per_group,
        # All group-phase groups play at once; the group size says nothing about
        # how many groups run in parallel
        concurrent_groups=group_count,
    )


def project_phases(plan: TournamentPlan) -> List[PhaseSummary]:
    """
    Build the ordered phase list.

    A round's advancing_players is the seat capacity of the next round
    (its group count times group size); the final round produces 1 winner.
    """
    phases: List[PhaseSummary] = []
    total_players = plan.player_count

    if plan.group_phase_enabled and plan.player_count > 0:
        group_phase = _group_phase_summary(plan)
        phases.append(group_phase)
        total_players = group_phase.advancing_players

    last_index = len(plan.rounds) - 1
    for index, r in enumerate(plan.rounds):
        if index < last_index:
            nxt = plan.rounds[index + 1]
            advancing_players = nxt.group_count * nxt.players_per_group
        else:
            advancing_players = 1

        phases.append(PhaseSummary(
            name=r.name,
            group_count=r.group_count,
            players_per_group=r.players_per_group,
            total_players=total_players,
            advancing_players=advancing_players,
            matches_per_group=r.matches_per_group,
            advancing_players_per_group=r.advancing_players_per_group,
            concurrent_groups=r.concurrent_groups,
        ))
        total_players = advancing_players

    return phases
