import json
from pathlib import Path
from typing import Union

import pydantic

from logs import get_logger
from models import AppState

log = get_logger("store")


class StateStore:
    """Whole-document JSON persistence for AppState.

    ``load`` never raises: a missing, unreadable or malformed file yields the
    default empty state. ``save`` overwrites the file and reports failure
    through its return value instead of raising.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> AppState:
        if not self.path.exists():
            log.info("state_file_missing", path=str(self.path))
            return AppState.default()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            log.warning("state_file_unreadable", path=str(self.path), error=str(exc))
            return AppState.default()
        try:
            state = AppState.model_validate(data)
        except pydantic.ValidationError as exc:
            log.warning(
                "state_file_invalid",
                path=str(self.path),
                errors=exc.error_count(),
            )
            return AppState.default()
        log.info(
            "state_loaded",
            path=str(self.path),
            active=state.active_project.name if state.active_project else None,
            delivered=len(state.delivered_projects),
        )
        return state

    def save(self, state: AppState) -> bool:
        text = json.dumps(state.to_json(), indent=2, ensure_ascii=False)
        try:
            self.path.write_text(text, encoding="utf-8")
        except OSError as exc:
            log.error("state_save_failed", path=str(self.path), error=str(exc))
            return False
        log.debug("state_saved", path=str(self.path))
        return True
