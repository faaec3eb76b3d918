"""Dependencias FastAPI: acceso a los componentes creados en create_app()."""

from __future__ import annotations

from fastapi import Request

from .dispatch import PruneDispatcher
from .ingest import IngestHandler
from .snapshots import EvictionSweeper, SnapshotStore


def get_store(request: Request) -> SnapshotStore:
    return request.app.state.store


def get_ingest_handler(request: Request) -> IngestHandler:
    return request.app.state.ingest_handler


def get_dispatcher(request: Request) -> PruneDispatcher:
    return request.app.state.dispatcher


def get_sweeper(request: Request) -> EvictionSweeper:
    return request.app.state.sweeper
