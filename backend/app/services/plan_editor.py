"""
Observable holder for the plan being edited.

The engine reducers are pure; this is the one place a "current" plan lives.
Each dispatch replaces the current value with the reducer's output and
notifies subscribers in subscription order. One editor per editing session,
driven from a single thread.
"""

import logging
from typing import Callable, List

from app.services.round_plan_engine import TournamentPlan, derive_group_counts

logger = logging.getLogger(__name__)

PlanListener = Callable[[TournamentPlan], None]
PlanReducer = Callable[..., TournamentPlan]


class PlanEditor:
    def __init__(self, plan: TournamentPlan):
        self._plan = derive_group_counts(plan)
        self._listeners: List[PlanListener] = []

    @property
    def plan(self) -> TournamentPlan:
        return self._plan

    def subscribe(self, listener: PlanListener) -> Callable[[], None]:
        """Register listener, call it once with the current plan, return an unsubscribe callable."""
        self._listeners.append(listener)
        listener(self._plan)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, reducer: PlanReducer, *args, **kwargs) -> TournamentPlan:
        """Apply reducer(current_plan, *args, **kwargs); notify only when the plan changed."""
        updated = reducer(self._plan, *args, **kwargs)
        if updated == self._plan:
            logger.debug("%s left the plan unchanged", getattr(reducer, "__name__", reducer))
            return self._plan

        self._plan = updated
        for listener in list(self._listeners):
            listener(updated)
        return updated
