"""
Shared data models for the stock watcher.
"""

from datetime import datetime
from typing import List
from pydantic import BaseModel, Field, ConfigDict


class CycleReport(BaseModel):
    """Outcome of one poll cycle."""

    model_config = ConfigDict(validate_assignment=True)

    cycle_number: int = Field(ge=1)
    succeeded: List[str] = Field(default_factory=list)
    failed: List[str] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=datetime.now)
    duration_seconds: float = Field(default=0.0, ge=0.0)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)
