"""
Plan Payload — boundary between submitted JSON and TournamentPlan values.

Inbound shape (camelCase, as submitted for persistence):
  { name, description, startDate, endDate, allowUnderfilledGroups,
    playerCount, groupPhase, groupPhaseSize,
    rounds: [{ name, matchCount, playerAdvancementCount, groupSize,
               groupCount, concurrentGroupCount }] }

A payload that cannot be read at all (bad JSON, wrong types, not an object)
raises PlanPayloadError before validation is attempted. Missing or empty
values that validation can explain inline (blank name, no dates, zero
players, no rounds) are let through to plan_validation instead.
"""

import json
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from app.config import DEFAULT_GROUP_PHASE_SIZE
from app.models.tournament import TournamentStatus, normalize_status
from app.services.errors import PlanPayloadError
from app.services.round_plan_engine import RoundSpec, TournamentPlan

# ============================================================================
# Pydantic Payload Models
# ============================================================================


class RoundPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    match_count: int = Field(default=0, alias="matchCount")
    player_advancement_count: int = Field(default=0, alias="playerAdvancementCount")
    group_size: int = Field(default=0, alias="groupSize")
    group_count: int = Field(default=1, alias="groupCount")
    concurrent_group_count: int = Field(default=1, alias="concurrentGroupCount")

    def to_round(self) -> RoundSpec:
        return RoundSpec(
            name=self.name,
            players_per_group=self.group_size,
            group_count=self.group_count,
            matches_per_group=self.match_count,
            advancing_players_per_group=self.player_advancement_count,
            concurrent_groups=self.concurrent_group_count,
        )

    @classmethod
    def from_round(cls, round_spec: RoundSpec) -> "RoundPayload":
        return cls(
            name=round_spec.name,
            match_count=round_spec.matches_per_group,
            player_advancement_count=round_spec.advancing_players_per_group,
            group_size=round_spec.players_per_group,
            group_count=round_spec.group_count,
            concurrent_group_count=round_spec.concurrent_groups,
        )


class TournamentPlanPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    description: str = ""
    start_date: Optional[date] = Field(default=None, alias="startDate")
    end_date: Optional[date] = Field(default=None, alias="endDate")
    allow_underfilled_groups: bool = Field(default=False, alias="allowUnderfilledGroups")
    player_count: int = Field(default=0, alias="playerCount")
    group_phase: bool = Field(default=False, alias="groupPhase")
    group_phase_size: int = Field(default=DEFAULT_GROUP_PHASE_SIZE, alias="groupPhaseSize")
    rounds: List[RoundPayload] = Field(default_factory=list)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def blank_date_is_missing(cls, v):
        """Form inputs submit "" for an untouched date field."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def to_plan(self) -> TournamentPlan:
        return TournamentPlan(
            name=self.name,
            description=self.description,
            start_date=self.start_date,
            end_date=self.end_date,
            player_count=self.player_count,
            group_phase_enabled=self.group_phase,
            group_phase_size=self.group_phase_size,
            allow_underfilled_groups=self.allow_underfilled_groups,
            rounds=tuple(r.to_round() for r in self.rounds),
        )

    @classmethod
    def from_plan(cls, plan: TournamentPlan) -> "TournamentPlanPayload":
        return cls(
            name=plan.name,
            description=plan.description,
            start_date=plan.start_date,
            end_date=plan.end_date,
            allow_underfilled_groups=plan.allow_underfilled_groups,
            player_count=plan.player_count,
            group_phase=plan.group_phase_enabled,
            group_phase_size=plan.group_phase_size,
            rounds=[RoundPayload.from_round(r) for r in plan.rounds],
        )


class TournamentListing(BaseModel):
    """Row returned by the listing collaborator; status arrives in any case."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    description: str = ""
    start_date: Optional[date] = Field(default=None, alias="startDate")
    end_date: Optional[date] = Field(default=None, alias="endDate")
    status: TournamentStatus = TournamentStatus.draft
    player_count: int = Field(default=0, alias="playerCount")

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status_value(cls, v):
        return normalize_status(v)


# ============================================================================
# Conversion
# ============================================================================


def _validation_error_map(exc: ValidationError) -> Dict[str, str]:
    """Flatten pydantic errors to {"rounds.0.groupSize": message}; first message per path wins."""
    errors: Dict[str, str] = {}
    for err in exc.errors():
        path = ".".join(str(part) for part in err.get("loc", ())) or "form"
        errors.setdefault(path, err.get("msg", "Invalid value"))
    return errors


def parse_plan_payload(raw: Any) -> TournamentPlan:
    """
    Parse a submitted payload (JSON text or already-decoded mapping) into a plan.

    Raises PlanPayloadError when the payload is missing, is not JSON, or does
    not have the plan shape.
    """
    if raw is None:
        raise PlanPayloadError("Invalid form submission", {"form": "Missing or invalid payload"})

    data: Any = raw
    if isinstance(raw, (str, bytes)):
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            raise PlanPayloadError(
                "Invalid payload: unable to parse JSON",
                {"form": "Malformed payload JSON"},
            )

    if not isinstance(data, Mapping):
        raise PlanPayloadError("Invalid payload: expected an object", {"form": "Payload must be an object"})

    try:
        payload = TournamentPlanPayload.model_validate(dict(data))
    except ValidationError as exc:
        raise PlanPayloadError("Invalid payload: unexpected shape", _validation_error_map(exc))

    return payload.to_plan()


def plan_to_payload(plan: TournamentPlan) -> Dict[str, Any]:
    """Render a plan in the camelCase shape handed to collaborators."""
    return TournamentPlanPayload.from_plan(plan).model_dump(by_alias=True, mode="json")
