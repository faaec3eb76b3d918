from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


def rfc3339_now(now: Optional[datetime] = None) -> str:
    current = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return current.strftime("%Y-%m-%dT%H:%M:%SZ")


class DockerStatsReport(BaseModel):
    # Mismo contrato que DockerStatsIn del collector
    instance_id: str
    images_size_gb: float = Field(..., ge=0)
    timestamp: str = Field(default_factory=rfc3339_now)
    prune_action: bool = False
