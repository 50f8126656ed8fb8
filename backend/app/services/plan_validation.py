"""
Plan Validation — Authoritative structure check for a round plan.

Pure function over a TournamentPlan. Never mutates the plan, never raises for
an invalid plan: every applicable problem is collected into a
PlanValidationResult keyed by field path (e.g. "rounds.1.concurrentGroups"),
so callers can render errors inline.

Two kinds of issue:
  - field:     one value out of bounds, keyed by its own path
  - structure: final-round or chain-consistency violation, keyed by "rounds"

Only the first issue per path is kept.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from app.services.errors import PlanRejectedError
from app.services.round_plan_engine import (
    TournamentPlan,
    players_entering_first_round,
)
from app.services.round_plan_rules import (
    MAX_NAME_LENGTH,
    MIN_ADVANCING_PLAYERS,
    MIN_CONCURRENT_GROUPS,
    MIN_GROUP_COUNT,
    MIN_GROUP_SIZE,
)

logger = logging.getLogger(__name__)

ROUNDS_PATH = "rounds"


class IssueKind(str, Enum):
    field = "field"
    structure = "structure"


@dataclass(frozen=True)
class PlanIssue:
    kind: IssueKind
    code: str
    message: str


@dataclass
class PlanValidationResult:
    errors: Dict[str, PlanIssue] = field(default_factory=dict)

    @property
    def valid(self) -> bool:
        return not self.errors

    def add(self, path: str, kind: IssueKind, code: str, message: str) -> None:
        # First message per path wins
        if path not in self.errors:
            self.errors[path] = PlanIssue(kind=kind, code=code, message=message)

    def messages(self) -> Dict[str, str]:
        return {path: issue.message for path, issue in self.errors.items()}

    def structural(self) -> Optional[PlanIssue]:
        return self.errors.get(ROUNDS_PATH)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": {
                path: {"kind": issue.kind.value, "code": issue.code, "message": issue.message}
                for path, issue in self.errors.items()
            },
        }


def _round_path(index: int, field_name: str) -> str:
    return f"{ROUNDS_PATH}.{index}.{field_name}"


# ============================================================================
# Checks
# ============================================================================


def _check_details(plan: TournamentPlan, result: PlanValidationResult) -> None:
    name = (plan.name or "").strip()
    if not name:
        result.add("name", IssueKind.field, "E_NAME_REQUIRED", "Tournament name is required")
    elif len(name) > MAX_NAME_LENGTH:
        result.add(
            "name", IssueKind.field, "E_NAME_TOO_LONG",
            f"Tournament name must be at most {MAX_NAME_LENGTH} characters",
        )

    if plan.start_date is None:
        result.add("startDate", IssueKind.field, "E_START_DATE_REQUIRED", "Start date is required")

    if plan.end_date is None:
        result.add("endDate", IssueKind.field, "E_END_DATE_REQUIRED", "End date is required")
    elif plan.start_date is not None and plan.end_date < plan.start_date:
        result.add("endDate", IssueKind.field, "E_END_BEFORE_START", "End date must be after start date")

    if plan.player_count <= 0:
        result.add(
            "playerCount", IssueKind.field, "E_PLAYER_COUNT",
            "Number of players must be greater than 0",
        )

    if plan.group_phase_enabled and plan.group_phase_size < MIN_GROUP_SIZE:
        result.add(
            "groupPhaseSize", IssueKind.field, "E_GROUP_PHASE_SIZE",
            f"Group phase size must be at least {MIN_GROUP_SIZE}",
        )


def _check_round_fields(plan: TournamentPlan, result: PlanValidationResult) -> None:
    for i, r in enumerate(plan.rounds):
        label = f"Round {i + 1}"

        if r.group_count < MIN_GROUP_COUNT:
            result.add(
                _round_path(i, "groupCount"), IssueKind.field, "E_GROUP_COUNT",
                f"{label}: Number of groups must be greater than 0",
            )

        if r.players_per_group < MIN_GROUP_SIZE:
            result.add(
                _round_path(i, "playersPerGroup"), IssueKind.field, "E_GROUP_SIZE",
                f"{label}: Players per group must be at least {MIN_GROUP_SIZE}",
            )

        if r.matches_per_group <= 0:
            result.add(
                _round_path(i, "matchesPerGroup"), IssueKind.field, "E_MATCH_COUNT",
                f"{label}: Matches per group must be greater than 0",
            )

        # Strictly below the group size: at least one player per group is eliminated
        if not MIN_ADVANCING_PLAYERS <= r.advancing_players_per_group < r.players_per_group:
            result.add(
                _round_path(i, "advancingPlayersPerGroup"), IssueKind.field, "E_ADVANCING_RANGE",
                f"{label}: Advancing players must be between "
                f"{MIN_ADVANCING_PLAYERS} and {r.players_per_group - 1}",
            )

        if r.concurrent_groups < MIN_CONCURRENT_GROUPS:
            result.add(
                _round_path(i, "concurrentGroups"), IssueKind.field, "E_CONCURRENT_MIN",
                f"{label}: Concurrent groups must be at least {MIN_CONCURRENT_GROUPS}",
            )
        elif r.concurrent_groups > r.group_count:
            result.add(
                _round_path(i, "concurrentGroups"), IssueKind.field, "E_CONCURRENT_EXCEEDS_GROUPS",
                f"{label}: Concurrent groups cannot exceed the total number of groups ({r.group_count})",
            )


def _check_final_round(plan: TournamentPlan, result: PlanValidationResult) -> None:
    last = plan.last_round
    if last is not None and last.group_count != 1:
        result.add(
            ROUNDS_PATH, IssueKind.structure, "E_FINAL_ROUND_GROUPS",
            f"Last round must have exactly one group, got {last.group_count}",
        )


def _check_chain(plan: TournamentPlan, result: PlanValidationResult) -> None:
    """Every seat in every round is filled by exactly the players entering it."""
    for i, r in enumerate(plan.rounds):
        seats = r.group_count * r.players_per_group
        if i == 0:
            expected = players_entering_first_round(plan)
            if seats != expected:
                source = "advancing from the group phase" if plan.group_phase_enabled else "in tournament"
                result.add(
                    ROUNDS_PATH, IssueKind.structure, "E_CHAIN_FIRST_ROUND",
                    f"Number of players in first round ({seats}) must be equal to "
                    f"total players {source} ({expected})",
                )
        else:
            prev = plan.rounds[i - 1]
            expected = prev.group_count * prev.advancing_players_per_group
            if seats != expected:
                result.add(
                    ROUNDS_PATH, IssueKind.structure, "E_CHAIN_ROUND",
                    f"Number of players in round {i + 1} ({seats}) must be equal to "
                    f"total advancing players of previous round ({expected})",
                )


# ============================================================================
# Entry points
# ============================================================================


def validate_plan(plan: TournamentPlan) -> PlanValidationResult:
    """
    Validate a plan end to end without short-circuiting.

    The final-round check applies regardless of allow_underfilled_groups;
    the chain check only when underfilled groups are not allowed.
    """
    result = PlanValidationResult()

    _check_details(plan, result)

    if not plan.rounds:
        result.add(
            ROUNDS_PATH, IssueKind.field, "E_ROUNDS_REQUIRED",
            "At least one round is required",
        )
        return result

    _check_round_fields(plan, result)
    _check_final_round(plan, result)
    if not plan.allow_underfilled_groups:
        _check_chain(plan, result)

    return result


def accept_plan(plan: TournamentPlan) -> TournamentPlan:
    """
    Acceptance gate: last check before a plan leaves for persistence.

    Returns the plan untouched when valid, raises PlanRejectedError otherwise.
    """
    result = validate_plan(plan)
    if not result.valid:
        logger.info(
            "Rejected plan %r: %s",
            plan.name, ", ".join(sorted(result.errors)),
        )
        raise PlanRejectedError(result)
    return plan
