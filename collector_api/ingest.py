"""Ingest de mediciones enviadas por los agentes.

El timestamp se parsea una sola vez acá (Snapshot.observed_at). Un timestamp
no parseable NO se rechaza: se guarda marcado como corrupto y el sweeper lo
elimina en la próxima pasada.

SECURITY: no se autentica al emisor; cualquier caller puede sobrescribir la
entrada de cualquier instancia (red interna de confianza).
"""

from __future__ import annotations

import logging

from .schemas import DockerStatsIn
from .snapshots import Snapshot, SnapshotStore

logger = logging.getLogger(__name__)


class IngestHandler:
    """Convierte un payload validado en Snapshot y hace upsert."""

    def __init__(self, store: SnapshotStore):
        self._store = store

    def ingest(self, payload: DockerStatsIn) -> Snapshot:
        snapshot = Snapshot.from_report(
            instance_id=payload.instance_id,
            images_size_gb=payload.images_size_gb,
            timestamp=payload.timestamp,
            prune_action=payload.prune_action,
        )
        self._store.upsert(snapshot)

        logger.info(
            "[WEB] Stats from %s: size=%.2fGB, prune=%s, ts=%s",
            snapshot.instance_id,
            snapshot.images_size_gb,
            snapshot.prune_action,
            snapshot.timestamp,
        )
        if snapshot.is_corrupt:
            logger.warning(
                "[WEB] Unparseable timestamp from %s: %r (will be evicted on next sweep)",
                snapshot.instance_id,
                snapshot.timestamp,
            )
        return snapshot
