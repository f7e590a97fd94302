from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ..domain import CapacityJob, TargetSpec


class CapacityJobRequest(BaseModel):
    """Job request body; the older ``target*``/``newCapacity`` names are accepted too."""

    model_config = ConfigDict(populate_by_name=True)

    day: date = Field(validation_alias=AliasChoices("date", "targetDate", "day"))
    time: str = Field(min_length=1, validation_alias=AliasChoices("time", "targetTime"))
    name: Optional[str] = Field(default=None, validation_alias=AliasChoices("name", "targetName"))
    capacity: int = Field(ge=0, validation_alias=AliasChoices("capacity", "newCapacity"))
    strict_name_required: bool = Field(
        default=True,
        validation_alias=AliasChoices("strictNameRequired", "strictRequireName", "strict_name_required"),
    )
    debug: bool = Field(default=False)
    dry_run: bool = Field(default=False, validation_alias=AliasChoices("dryRun", "dry_run"))
    wait: bool = Field(default=True)
    email: Optional[str] = Field(default=None)
    password: Optional[str] = Field(default=None, repr=False)

    def to_job(self) -> CapacityJob:
        return CapacityJob(
            target=TargetSpec(
                day=self.day,
                time=self.time.strip(),
                name=(self.name or "").strip() or None,
                strict_name_required=self.strict_name_required,
            ),
            capacity=self.capacity,
            debug=self.debug,
            dry_run=self.dry_run,
            email=self.email,
            password=self.password,
        )


class ApiCallRequest(BaseModel):
    arguments: Dict[str, Any] = Field(default_factory=dict)
