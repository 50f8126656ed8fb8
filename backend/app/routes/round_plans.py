"""
Round Plan Endpoints — editing, preview and acceptance for round plans.

Every endpoint takes the whole plan in the request body and returns a new
value; nothing is stored between requests.

  POST /round-plans/new                     default one-round plan
  POST /round-plans/derive                  recompute group counts
  POST /round-plans/rounds                  append a seeded round
  POST /round-plans/rounds/{index}          edit fields of one round
  POST /round-plans/rounds/{index}/remove   remove a round (no-op on the last one)
  POST /round-plans/validate                {valid, errors}
  POST /round-plans/preview                 phase summaries for display
  POST /round-plans/accept                  acceptance gate before persistence
  GET  /round-plans/statuses                normalize an external status value
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from app.models.tournament import TournamentStatus, normalize_status
from app.services.errors import PlanPayloadError, PlanRejectedError
from app.services.phase_projection import project_phases
from app.services.plan_payload import parse_plan_payload, plan_to_payload
from app.services.plan_validation import accept_plan, validate_plan
from app.services.round_plan_engine import (
    TournamentPlan,
    add_round,
    derive_group_counts,
    new_plan,
    remove_round,
    total_matches,
    update_round,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class NewPlanRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    player_count: int = Field(default=0, alias="playerCount")
    group_phase: bool = Field(default=False, alias="groupPhase")
    allow_underfilled_groups: bool = Field(default=False, alias="allowUnderfilledGroups")


class RoundEditRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    plan: Any
    name: Optional[str] = None
    group_size: Optional[int] = Field(default=None, alias="groupSize")
    match_count: Optional[int] = Field(default=None, alias="matchCount")
    player_advancement_count: Optional[int] = Field(default=None, alias="playerAdvancementCount")
    concurrent_group_count: Optional[int] = Field(default=None, alias="concurrentGroupCount")

    def round_changes(self) -> Dict[str, Any]:
        mapping = {
            "name": "name",
            "group_size": "players_per_group",
            "match_count": "matches_per_group",
            "player_advancement_count": "advancing_players_per_group",
            "concurrent_group_count": "concurrent_groups",
        }
        provided = self.model_dump(exclude_unset=True, exclude={"plan"})
        return {mapping[k]: v for k, v in provided.items() if v is not None}


class PhaseSummaryResponse(BaseModel):
    name: str
    group_count: int
    players_per_group: int
    total_players: int
    advancing_players: int
    matches_per_group: int
    advancing_players_per_group: int
    concurrent_groups: int


class PlanPreviewResponse(BaseModel):
    total_rounds: int
    total_matches: int
    phases: List[PhaseSummaryResponse]


class StatusResponse(BaseModel):
    value: Optional[str] = None
    status: TournamentStatus


def _load_plan(payload: Any) -> TournamentPlan:
    try:
        return parse_plan_payload(payload)
    except PlanPayloadError as e:
        raise HTTPException(status_code=400, detail={"message": e.message, "errors": e.errors})


@router.post("/round-plans/new")
def create_plan(request: NewPlanRequest):
    """Start a plan with one default round"""
    plan = new_plan(
        player_count=request.player_count,
        group_phase_enabled=request.group_phase,
        allow_underfilled_groups=request.allow_underfilled_groups,
    )
    return plan_to_payload(plan)


@router.post("/round-plans/derive")
def derive_plan(payload: Any = Body(...)):
    """Recompute group counts from the advancement chain"""
    return plan_to_payload(derive_group_counts(_load_plan(payload)))


@router.post("/round-plans/rounds")
def append_round(payload: Any = Body(...)):
    """Append a round seeded from the last one"""
    return plan_to_payload(add_round(_load_plan(payload)))


@router.post("/round-plans/rounds/{index}")
def edit_round(index: int, request: RoundEditRequest):
    """Edit fields of one round; matches per group follows the group size unless overridden"""
    plan = _load_plan(request.plan)
    if not 0 <= index < len(plan.rounds):
        raise HTTPException(status_code=404, detail="Round not found")
    return plan_to_payload(update_round(plan, index, **request.round_changes()))


@router.post("/round-plans/rounds/{index}/remove")
def delete_round(index: int, payload: Any = Body(...)):
    """Remove a round; the only remaining round is never removed"""
    return plan_to_payload(remove_round(_load_plan(payload), index))


@router.post("/round-plans/validate")
def validate_round_plan(payload: Any = Body(...)):
    """Validate the plan without deriving; returns every applicable error"""
    return validate_plan(_load_plan(payload)).to_dict()


@router.post("/round-plans/preview", response_model=PlanPreviewResponse)
def preview_round_plan(payload: Any = Body(...)):
    """Phase-by-phase summary for live preview; works on invalid plans too"""
    plan = _load_plan(payload)
    return PlanPreviewResponse(
        total_rounds=len(plan.rounds),
        total_matches=total_matches(plan),
        phases=[PhaseSummaryResponse(**p.to_dict()) for p in project_phases(plan)],
    )


@router.post("/round-plans/accept")
def accept_round_plan(payload: Any = Body(...)):
    """
    Acceptance gate run right before the plan goes to persistence.

    422 with the validation result when the plan is not acceptable.
    """
    plan = _load_plan(payload)
    try:
        accepted = accept_plan(plan)
    except PlanRejectedError as e:
        raise HTTPException(status_code=422, detail=e.result.to_dict())
    return {"status": TournamentStatus.draft.value, "plan": plan_to_payload(accepted)}


@router.get("/round-plans/statuses", response_model=StatusResponse)
def resolve_status(value: Optional[str] = None):
    """Normalize an external status value; unknown values resolve to draft"""
    return StatusResponse(value=value, status=normalize_status(value))
