"""Lógica del agente: medir, reportar y hacer prune.

- Cada STATS_INTERVAL_SECONDS: mide el tamaño de imágenes y lo reporta
- Cada PRUNE_INTERVAL_SECONDS: prune automático + reporte post-prune
- POST /prune del agente: mismo flujo de prune, disparado por el collector

Ningún error de Docker o del collector detiene el loop; solo se loguea.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from .docker_stats import DockerStatsCollector, DockerStatsError, PruneReport
from .reporter import ReportError, StatsReporter
from .schemas import DockerStatsReport

logger = logging.getLogger(__name__)


class AgentService:
    """Orquesta DockerStatsCollector y StatsReporter para una instancia."""

    def __init__(
        self,
        instance_id: str,
        docker_stats: DockerStatsCollector,
        reporter: StatsReporter,
    ):
        self.instance_id = instance_id
        self._docker = docker_stats
        self._reporter = reporter
        # Un solo prune a la vez (timer diario y pedidos manuales pueden coincidir)
        self._prune_lock = threading.Lock()

    def collect_and_report(self) -> Optional[DockerStatsReport]:
        """Mide y reporta. Retorna el reporte enviado o None si falló."""
        try:
            size_gb = self._docker.images_size_gb()
        except DockerStatsError as e:
            logger.error("[ERROR] getDockerImagesSizeGB: %s", e)
            return None

        report = DockerStatsReport(instance_id=self.instance_id, images_size_gb=size_gb)
        if not self._send(report, what="sendStats"):
            return None
        return report

    def prune_and_report(self) -> Optional[PruneReport]:
        """Prune + reporte post-prune (prune_action=True).

        Returns:
            PruneReport si el prune se ejecutó, None si falló o ya había uno en curso
        """
        if not self._prune_lock.acquire(blocking=False):
            logger.info("[AGENT] Prune already running, skipping")
            return None

        try:
            try:
                result = self._docker.prune()
            except DockerStatsError as e:
                logger.error("[ERROR] Prune failed: %s", e)
                return None

            logger.info(
                "[AGENT] Docker prune completed. containers=%d images=%d reclaimed=%.2fGB",
                len(result.containers_deleted),
                len(result.images_deleted),
                result.space_reclaimed_gb,
            )

            try:
                size_gb = self._docker.images_size_gb()
            except DockerStatsError as e:
                logger.warning("[AGENT] Could not re-measure after prune: %s", e)
                size_gb = 0.0

            report = DockerStatsReport(
                instance_id=self.instance_id,
                images_size_gb=size_gb,
                prune_action=True,
            )
            self._send(report, what="send prune info")
            return result
        finally:
            self._prune_lock.release()

    def docker_available(self) -> bool:
        return self._docker.ping()

    def _send(self, report: DockerStatsReport, what: str) -> bool:
        try:
            self._reporter.send(report)
            return True
        except ReportError as e:
            logger.error("[ERROR] Failed to %s: %s", what, e)
            return False


class AgentScheduler:
    """Thread con dos timers independientes: stats y prune automático."""

    def __init__(
        self,
        service: AgentService,
        stats_interval_seconds: float = 3600.0,
        prune_interval_seconds: float = 24 * 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._service = service
        self._stats_interval = stats_interval_seconds
        self._prune_interval = prune_interval_seconds
        self._clock = clock

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="agent-scheduler", daemon=True)
        self._thread.start()
        logger.info(
            "[AGENT] Scheduler started: stats every %.0fs, prune every %.0fs",
            self._stats_interval,
            self._prune_interval,
        )

    def stop(self, timeout: float = 5.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def _run(self) -> None:
        next_stats = self._clock() + self._stats_interval
        next_prune = self._clock() + self._prune_interval

        while True:
            wait_for = max(0.0, min(next_stats, next_prune) - self._clock())
            if self._stop_event.wait(wait_for):
                return

            now = self._clock()
            try:
                if now >= next_stats:
                    next_stats = now + self._stats_interval
                    self._service.collect_and_report()
                if now >= next_prune:
                    next_prune = now + self._prune_interval
                    logger.info("[AGENT] Daily prune triggered")
                    self._service.prune_and_report()
            except Exception:
                logger.exception("[AGENT] Scheduler iteration failed, continuing")
