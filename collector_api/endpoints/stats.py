"""Endpoints de métricas Docker: ingest desde agentes y listado JSON."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from ..dependencies import get_ingest_handler, get_store
from ..ingest import IngestHandler
from ..schemas import DockerStatsIn, IngestAck, SnapshotOut
from ..snapshots import SnapshotStore

router = APIRouter(tags=["stats"])


@router.post("/api/docker-stats", response_model=IngestAck, status_code=201)
def ingest_docker_stats(
    payload: DockerStatsIn,
    handler: IngestHandler = Depends(get_ingest_handler),
):
    """Los agentes envían acá su medición periódica (o post-prune).

    Payload mal formado -> 422 sin mutar el store.
    """
    handler.ingest(payload)
    return IngestAck()


@router.get("/api/docker-stats", response_model=List[SnapshotOut])
def list_docker_stats(store: SnapshotStore = Depends(get_store)):
    """Última medición de cada instancia (orden por instance_id)."""
    snapshots = sorted(store.list(), key=lambda s: s.instance_id)
    return [SnapshotOut(**s.to_dict()) for s in snapshots]
