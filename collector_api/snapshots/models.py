"""Modelo de dominio del snapshot por instancia."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .timestamps import parse_rfc3339


@dataclass(frozen=True)
class Snapshot:
    """Última medición reportada por una instancia.

    `timestamp` es el string original enviado por el agente; `observed_at` es
    el mismo instante ya parseado en el ingest (None si no se pudo parsear).
    La retención se decide siempre con `observed_at`.
    """

    instance_id: str
    images_size_gb: float
    timestamp: str
    prune_action: bool = False
    observed_at: Optional[datetime] = None

    @property
    def is_corrupt(self) -> bool:
        return self.observed_at is None

    @classmethod
    def from_report(
        cls,
        instance_id: str,
        images_size_gb: float,
        timestamp: str,
        prune_action: bool = False,
    ) -> "Snapshot":
        return cls(
            instance_id=instance_id,
            images_size_gb=float(images_size_gb),
            timestamp=timestamp,
            prune_action=bool(prune_action),
            observed_at=parse_rfc3339(timestamp),
        )

    def to_dict(self) -> dict:
        return {
            "instance_id": self.instance_id,
            "images_size_gb": self.images_size_gb,
            "timestamp": self.timestamp,
            "prune_action": self.prune_action,
        }
