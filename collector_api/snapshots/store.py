"""Store en memoria de snapshots por instancia.

FUENTE ÚNICA DE VERDAD para la última medición de cada instancia.

Reglas:
- Como máximo un snapshot por instance_id
- Un ingest nuevo reemplaza completo el anterior (last-write-wins, sin merge)
- No hay persistencia: el store vive lo que vive el proceso

El store es un objeto explícito (no singleton de módulo). La app lo crea una
vez y lo pasa a endpoints, dispatcher y sweeper.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from .models import Snapshot
from .rwlock import ReadWriteLock

logger = logging.getLogger(__name__)


class SnapshotStore:
    """Mapa concurrente instance_id -> Snapshot protegido por un RW lock."""

    def __init__(self) -> None:
        self._data: Dict[str, Snapshot] = {}
        self._lock = ReadWriteLock()

    def upsert(self, snapshot: Snapshot) -> None:
        """Reemplaza incondicionalmente la entrada de la instancia."""
        with self._lock.write_locked():
            self._data[snapshot.instance_id] = snapshot

    def list(self) -> List[Snapshot]:
        """Copia consistente de todas las entradas (orden no especificado)."""
        with self._lock.read_locked():
            return list(self._data.values())

    def get(self, instance_id: str) -> Optional[Snapshot]:
        with self._lock.read_locked():
            return self._data.get(instance_id)

    def remove(self, instance_id: str) -> bool:
        """Elimina la entrada si existe. Idempotente."""
        with self._lock.write_locked():
            return self._data.pop(instance_id, None) is not None

    def remove_if_unchanged(
        self,
        instance_id: str,
        expected: Optional[Snapshot],
    ) -> bool:
        """Delete condicional usado tras un prune remoto exitoso.

        Solo elimina si la entrada actual es la misma observada antes del
        dispatch, o si no es más nueva que ella. Un snapshot que llegó
        durante la llamada remota (más nuevo) se conserva.

        Returns:
            True si se eliminó la entrada
        """
        with self._lock.write_locked():
            current = self._data.get(instance_id)
            if current is None:
                return False

            if expected is None:
                # No había nada antes del dispatch: lo actual llegó durante la llamada
                logger.info(
                    "[STORE] Keeping %s: snapshot arrived during dispatch", instance_id
                )
                return False

            if current is not expected and _is_newer(current, expected):
                logger.info(
                    "[STORE] Keeping %s: fresher snapshot ts=%s (dispatch saw ts=%s)",
                    instance_id,
                    current.timestamp,
                    expected.timestamp,
                )
                return False

            del self._data[instance_id]
            return True

    def evict(self, predicate: Callable[[Snapshot], bool]) -> List[Snapshot]:
        """Elimina en una sola pasada todas las entradas que cumplen `predicate`.

        Cada decisión es independiente: si el predicado falla para una
        entrada, se loguea y se continúa con las demás.
        """
        evicted: List[Snapshot] = []
        with self._lock.write_locked():
            for instance_id, snapshot in list(self._data.items()):
                try:
                    should_evict = predicate(snapshot)
                except Exception:
                    logger.exception("[STORE] Eviction check failed for %s", instance_id)
                    continue
                if should_evict:
                    del self._data[instance_id]
                    evicted.append(snapshot)
        return evicted

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._data)

    def __contains__(self, instance_id: object) -> bool:
        with self._lock.read_locked():
            return instance_id in self._data


def _is_newer(current: Snapshot, expected: Snapshot) -> bool:
    """True si `current` es estrictamente más nuevo que `expected`.

    Sin timestamps comparables (alguno corrupto) se considera más nuevo
    cualquier objeto distinto: ante la duda se conserva la medición.
    """
    if current.observed_at is None or expected.observed_at is None:
        return True
    return current.observed_at > expected.observed_at
