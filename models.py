from datetime import datetime, timedelta
from typing import List, Optional

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Model(BaseModel):
    # snake_case in Python, camelCase on the wire and on disk
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ActiveProject(_Model):
    name: str = Field(min_length=1)
    started_at: AwareDatetime
    deadline_days: int = Field(gt=0)

    def deadline_at(self) -> datetime:
        return self.started_at + timedelta(days=self.deadline_days)

    def remaining(self, now: datetime) -> timedelta:
        left = self.deadline_at() - now
        return left if left > timedelta(0) else timedelta(0)


class DeliveredProject(_Model):
    model_config = ConfigDict(frozen=True)

    name: str
    started_at: AwareDatetime
    delivered_at: AwareDatetime


class AppState(_Model):
    active_project: Optional[ActiveProject]
    delivered_projects: List[DeliveredProject]

    @classmethod
    def default(cls) -> "AppState":
        return cls(active_project=None, delivered_projects=[])

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
