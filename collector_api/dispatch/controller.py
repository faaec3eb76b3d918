"""Control del prune manual: dispatch remoto + eviction condicional.

Máquina de estados por request:
    REQUESTED -> DISPATCHING -> SUCCEEDED (entrada eliminada del store)
                             -> FAILED    (store intacto)

Ambos resultados son terminales. Un fallo requiere que el operador vuelva a
pedir el prune; no hay reintento automático.

La llamada remota se hace FUERA del lock del store. Para no descartar una
medición que llegó durante la llamada, la eliminación es condicional al
snapshot observado antes del dispatch (ver SnapshotStore.remove_if_unchanged).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..snapshots import SnapshotStore
from .agent_client import AgentClient
from .errors import AgentDispatchError, AgentResponseError

logger = logging.getLogger(__name__)


class DispatchState(str, Enum):
    """Estados del dispatch de prune."""
    REQUESTED = "requested"
    DISPATCHING = "dispatching"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class DispatchOutcome:
    """Resultado terminal de un dispatch."""
    instance_id: str
    state: DispatchState
    evicted: bool = False
    reason: Optional[str] = None
    status_code: Optional[int] = None
    agent_responded: bool = False

    @property
    def succeeded(self) -> bool:
        return self.state == DispatchState.SUCCEEDED


class PruneDispatcher:
    """Dispara el prune en el agente y limpia el store si tuvo éxito."""

    def __init__(self, store: SnapshotStore, client: AgentClient):
        self._store = store
        self._client = client

    def dispatch(self, instance_id: str) -> DispatchOutcome:
        """Ejecuta un único intento de prune remoto para la instancia.

        Nunca lanza por fallos del agente: el fallo se devuelve en el outcome.
        """
        logger.info("[DISPATCH] %s -> %s", instance_id, DispatchState.REQUESTED.value)

        observed = self._store.get(instance_id)

        logger.info(
            "[DISPATCH] %s -> %s url=%s",
            instance_id,
            DispatchState.DISPATCHING.value,
            self._client.resolve_url(instance_id),
        )
        try:
            status_code = self._client.trigger_prune(instance_id)
        except AgentResponseError as e:
            return self._failed(instance_id, str(e), e.status_code, agent_responded=True)
        except AgentDispatchError as e:
            return self._failed(instance_id, str(e))

        evicted = self._store.remove_if_unchanged(instance_id, observed)
        logger.info(
            "[DISPATCH] %s -> %s status=%d evicted=%s",
            instance_id,
            DispatchState.SUCCEEDED.value,
            status_code,
            evicted,
        )
        return DispatchOutcome(
            instance_id=instance_id,
            state=DispatchState.SUCCEEDED,
            evicted=evicted,
            status_code=status_code,
            agent_responded=True,
        )

    def _failed(
        self,
        instance_id: str,
        reason: str,
        status_code: Optional[int] = None,
        agent_responded: bool = False,
    ) -> DispatchOutcome:
        logger.warning(
            "[DISPATCH] %s -> %s reason=%s", instance_id, DispatchState.FAILED.value, reason
        )
        return DispatchOutcome(
            instance_id=instance_id,
            state=DispatchState.FAILED,
            reason=reason,
            status_code=status_code,
            agent_responded=agent_responded,
        )
