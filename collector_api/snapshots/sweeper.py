"""Limpieza periódica de snapshots viejos o corruptos.

Cada tick hace una pasada completa sobre el store:
- Timestamp no parseable (observed_at=None) -> se elimina (dato corrupto)
- now - observed_at > retención -> se elimina

El sweeper es una unidad explícita (thread + Event de cancelación) que la
app arranca en startup y detiene en shutdown.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta
from typing import List, Optional

from .models import Snapshot
from .store import SnapshotStore
from .timestamps import utc_now

logger = logging.getLogger(__name__)


class EvictionSweeper:
    """Thread de limpieza periódica del SnapshotStore."""

    DEFAULT_RETENTION = timedelta(hours=24)
    DEFAULT_INTERVAL = 30 * 60.0  # segundos

    def __init__(
        self,
        store: SnapshotStore,
        retention: timedelta = DEFAULT_RETENTION,
        interval_seconds: float = DEFAULT_INTERVAL,
    ):
        """Inicializa el sweeper.

        Args:
            store: Store compartido con los endpoints
            retention: Edad máxima de un snapshot
            interval_seconds: Período entre pasadas (independiente de la retención)
        """
        self._store = store
        self._retention = retention
        self._interval_seconds = interval_seconds

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

        # Métricas
        self._sweeps = 0
        self._total_expired = 0
        self._total_corrupt = 0
        self._total_errors = 0

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Inicia el thread de limpieza periódica."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._sweep_loop, name="snapshot-sweeper", daemon=True
        )
        self._thread.start()
        logger.info(
            "[CLEANUP] Sweeper started: retention=%.0fs interval=%.1fs",
            self._retention.total_seconds(),
            self._interval_seconds,
        )

    def stop(self, timeout: float = 5.0) -> None:
        """Detiene el sweeper y espera al thread."""
        self._stop_event.set()

        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

        logger.info(
            "[CLEANUP] Sweeper stopped. Stats: sweeps=%d expired=%d corrupt=%d errors=%d",
            self._sweeps,
            self._total_expired,
            self._total_corrupt,
            self._total_errors,
        )

    def _sweep_loop(self) -> None:
        # wait() devuelve True en cuanto se pide stop, sin esperar el período completo
        while not self._stop_event.wait(self._interval_seconds):
            try:
                self.sweep()
            except Exception:
                self._total_errors += 1
                logger.exception("[CLEANUP] Sweep failed, continuing")

    def sweep(self, now: Optional[datetime] = None) -> List[str]:
        """Ejecuta una pasada completa sobre el store.

        Args:
            now: Instante actual (inyectable para tests). Default: UTC now.

        Returns:
            instance_ids eliminados en esta pasada
        """
        current_time = now or utc_now()
        expired: List[str] = []
        corrupt: List[str] = []

        def should_evict(snapshot: Snapshot) -> bool:
            if snapshot.observed_at is None:
                corrupt.append(snapshot.instance_id)
                return True
            if current_time - snapshot.observed_at > self._retention:
                expired.append(snapshot.instance_id)
                return True
            return False

        evicted = self._store.evict(should_evict)

        for instance_id in corrupt:
            logger.warning("[CLEANUP] Can't parse time for %s, removing", instance_id)
        for instance_id in expired:
            logger.info(
                "[CLEANUP] %s is older than %.0fs, removing",
                instance_id,
                self._retention.total_seconds(),
            )

        self._sweeps += 1
        self._total_expired += len(expired)
        self._total_corrupt += len(corrupt)

        return [s.instance_id for s in evicted]

    def get_stats(self) -> dict:
        """Retorna estadísticas del sweeper."""
        return {
            "running": self.is_running,
            "sweeps": self._sweeps,
            "total_expired": self._total_expired,
            "total_corrupt": self._total_corrupt,
            "total_errors": self._total_errors,
            "retention_seconds": self._retention.total_seconds(),
            "interval_seconds": self._interval_seconds,
        }
