"""Agente Docker: servidor HTTP para prune manual + loop periódico.

Ejecutar:
    python -m agent.main
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import BackgroundTasks, FastAPI, HTTPException
from fastapi.responses import PlainTextResponse

from common.config import AgentSettings, get_agent_settings
from common.server import bind_listen_socket, serve
from .docker_stats import DockerStatsCollector, DockerStatsError
from .reporter import StatsReporter
from .service import AgentScheduler, AgentService

logger = logging.getLogger(__name__)


def create_agent_app(
    service: AgentService,
    scheduler: Optional[AgentScheduler] = None,
) -> FastAPI:
    """App HTTP del agente. El scheduler (si hay) vive lo que vive la app."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if scheduler is not None:
            scheduler.start()
        try:
            yield
        finally:
            if scheduler is not None:
                scheduler.stop()

    app = FastAPI(title="Docker Stats Agent", version="0.1.0", lifespan=lifespan)
    app.state.service = service

    @app.post("/prune", response_class=PlainTextResponse)
    def prune(background_tasks: BackgroundTasks):
        """Responde de inmediato; el prune y el reporte corren en background."""
        background_tasks.add_task(service.prune_and_report)
        return "Prune initiated.\n"

    @app.get("/health", response_class=PlainTextResponse)
    def health():
        return "OK\n"

    @app.get("/ready", response_class=PlainTextResponse)
    def ready():
        """Listo para operar solo si el Docker Engine local responde."""
        if not service.docker_available():
            raise HTTPException(status_code=503, detail="docker not ready")
        return "READY\n"

    return app


def main() -> None:
    settings: AgentSettings = get_agent_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )

    try:
        sock = bind_listen_socket(settings.host, settings.port)
    except OSError as e:
        logger.critical("[FATAL] Agent HTTP server failed: %s", e)
        sys.exit(1)

    try:
        docker_stats = DockerStatsCollector(api_version=settings.docker_api_version)
    except DockerStatsError as e:
        logger.critical("[FATAL] Failed to create Docker client: %s", e)
        sock.close()
        sys.exit(1)

    if not docker_stats.ping():
        logger.warning("[AGENT] Docker Engine not reachable yet; /ready will report 503")

    reporter = StatsReporter(settings.remote_server_url, timeout=settings.report_timeout_seconds)
    service = AgentService(settings.instance_id, docker_stats, reporter)
    scheduler = AgentScheduler(
        service,
        stats_interval_seconds=settings.stats_interval_seconds,
        prune_interval_seconds=settings.prune_interval_seconds,
    )

    logger.info(
        "[AGENT] Started. InstanceID=%s. RemoteServer=%s",
        settings.instance_id,
        settings.remote_server_url,
    )
    try:
        serve(create_agent_app(service, scheduler), sock, log_level=settings.log_level)
    finally:
        reporter.close()
        docker_stats.close()


if __name__ == "__main__":
    main()
