from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, List

from errors import NoActiveProjectError, PersistenceError, ValidationError
from logs import get_logger
from models import ActiveProject, AppState, DeliveredProject
from store import StateStore

log = get_logger("service")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class MutationResult:
    state: AppState
    persisted: bool


def validate_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Project name is required.")
    return name.strip()


DEADLINE_MESSAGE = "Valid positive integer for deadlineDays is required."


def validate_deadline_days(deadline_days: Any) -> int:
    # bool is an int subclass; JSON true must not count as 1 day
    if isinstance(deadline_days, bool) or not isinstance(deadline_days, (int, float)):
        raise ValidationError(DEADLINE_MESSAGE)
    # is_integer() is False for inf and nan
    if isinstance(deadline_days, float) and not deadline_days.is_integer():
        raise ValidationError(DEADLINE_MESSAGE)
    if not 0 < deadline_days <= timedelta.max.days:
        raise ValidationError(DEADLINE_MESSAGE)
    return int(deadline_days)


class ProjectStateService:
    """Owns the in-memory AppState and persists it after every mutation."""

    def __init__(
        self,
        store: StateStore,
        clock: Callable[[], datetime] = utc_now,
        strict_persistence: bool = False,
    ):
        self.store = store
        self.clock = clock
        self.strict_persistence = strict_persistence
        self._state = store.load()

    def get_state(self) -> AppState:
        return self._state.model_copy(deep=True)

    def start_project(self, name: Any, deadline_days: Any) -> MutationResult:
        name = validate_name(name)
        deadline_days = validate_deadline_days(deadline_days)

        project = ActiveProject(name=name, started_at=self.clock(), deadline_days=deadline_days)
        try:
            project.deadline_at()
        except OverflowError:
            raise ValidationError(DEADLINE_MESSAGE)

        replaced = self._state.active_project
        if replaced is not None:
            log.warning("active_project_overwritten", previous=replaced.name, new=name)

        self._state = self._state.model_copy(update={"active_project": project})
        log.info("project_started", name=name, deadline_days=deadline_days)
        return self._commit()

    def deliver_project(self) -> MutationResult:
        active = self._state.active_project
        if active is None:
            log.info("deliver_rejected_no_active_project")
            raise NoActiveProjectError("No active project to deliver.")

        delivered = DeliveredProject(
            name=active.name, started_at=active.started_at, delivered_at=self.clock()
        )
        self._state = AppState(
            active_project=None,
            delivered_projects=[*self._state.delivered_projects, delivered],
        )
        log.info(
            "project_delivered",
            name=active.name,
            total_delivered=len(self._state.delivered_projects),
        )
        return self._commit()

    def reset_state(self) -> MutationResult:
        log.info("state_reset")
        self._state = AppState.default()
        return self._commit()

    def _commit(self) -> MutationResult:
        persisted = self.store.save(self._state)
        if not persisted and self.strict_persistence:
            raise PersistenceError("Failed to save state.")
        return MutationResult(state=self.get_state(), persisted=persisted)


def _same_month(a: datetime, b: datetime) -> bool:
    return (a.year, a.month) == (b.year, b.month)


def delivery_stats(state: AppState, now: datetime) -> dict:
    this_month = [
        p
        for p in state.delivered_projects
        if _same_month(p.delivered_at.astimezone(now.tzinfo), now)
    ]
    return {"total": len(state.delivered_projects), "this_month": len(this_month)}


def recent_deliveries(state: AppState) -> List[DeliveredProject]:
    return sorted(state.delivered_projects, key=lambda p: p.delivered_at, reverse=True)
