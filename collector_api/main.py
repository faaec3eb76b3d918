"""Collector de métricas Docker.

Recibe mediciones de los agentes, guarda la última por instancia en memoria,
las muestra en un dashboard y permite disparar un prune remoto.

Ejecutar:
    python -m collector_api.main
    uvicorn collector_api.main:app --port 3000
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

from fastapi import FastAPI

from common.config import CollectorSettings, get_collector_settings
from common.server import bind_listen_socket, serve
from .dispatch import AgentClient, PruneDispatcher
from .endpoints import dashboard_router, health_router, prune_router, stats_router
from .ingest import IngestHandler
from .snapshots import EvictionSweeper, SnapshotStore

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[CollectorSettings] = None,
    store: Optional[SnapshotStore] = None,
    agent_client: Optional[AgentClient] = None,
    start_sweeper: bool = True,
) -> FastAPI:
    """Composition root: crea store, sweeper y dispatcher y los cuelga de app.state.

    Args:
        settings: Configuración (default: desde env)
        store: Store a usar (tests pueden inyectar uno aislado)
        agent_client: Cliente hacia agentes (tests pueden inyectar un mock)
        start_sweeper: Si False, el sweeper no arranca con la app
    """
    settings = settings or get_collector_settings()
    store = store if store is not None else SnapshotStore()
    agent_client = agent_client or AgentClient(
        port=settings.agent_port,
        scheme=settings.agent_scheme,
        connect_timeout=settings.agent_connect_timeout_seconds,
        read_timeout=settings.agent_read_timeout_seconds,
    )
    sweeper = EvictionSweeper(
        store,
        retention=timedelta(seconds=settings.retention_seconds),
        interval_seconds=settings.sweep_interval_seconds,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if start_sweeper:
            sweeper.start()
        logger.info("[WEB] Collector ready on %s:%d", settings.host, settings.port)
        try:
            yield
        finally:
            sweeper.stop()
            agent_client.close()

    app = FastAPI(title="Docker Stats Collector", version="0.1.0", lifespan=lifespan)

    app.state.settings = settings
    app.state.store = store
    app.state.sweeper = sweeper
    app.state.ingest_handler = IngestHandler(store)
    app.state.dispatcher = PruneDispatcher(store, agent_client)

    app.include_router(dashboard_router)
    app.include_router(stats_router)
    app.include_router(prune_router)
    app.include_router(health_router)

    return app


def main() -> None:
    settings = get_collector_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )

    logger.info("[WEB] Starting on %s:%d", settings.host, settings.port)
    try:
        sock = bind_listen_socket(settings.host, settings.port)
    except OSError as e:
        # No se pudo hacer bind: único caso en que el proceso termina solo
        logger.critical("[FATAL] Collector HTTP server failed: %s", e)
        sys.exit(1)

    serve(create_app(settings), sock, log_level=settings.log_level)


app = create_app()


if __name__ == "__main__":
    main()
