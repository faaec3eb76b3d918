from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class DockerStatsIn(BaseModel):
    # Payload enviado por los agentes (POST /api/docker-stats)
    instance_id: str
    images_size_gb: float = Field(..., ge=0, allow_inf_nan=False)
    # RFC3339; si no es parseable se guarda igual y el sweeper lo elimina
    timestamp: str
    prune_action: bool = False

    @field_validator("instance_id")
    @classmethod
    def instance_id_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("instance_id must not be empty")
        return v

    model_config = {
        "json_schema_extra": {
            "example": {
                "instance_id": "build-runner-01",
                "images_size_gb": 12.5,
                "timestamp": "2024-01-01T00:00:00Z",
                "prune_action": False,
            }
        }
    }


class IngestAck(BaseModel):
    status: str = "ok"


class SnapshotOut(BaseModel):
    instance_id: str
    images_size_gb: float
    timestamp: str
    prune_action: bool


class PruneResult(BaseModel):
    status: str = "ok"
    instance_id: str
    evicted: bool
    message: str = "Prune done, metrics deleted"


class HealthOut(BaseModel):
    status: str = "ok"
    instances: int
    sweeper_running: bool
    sweeper: Optional[dict] = None
