"""Prune manual: el operador pide un prune en un agente.

    POST /api/prune?instance=my-host-123
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from ..dependencies import get_dispatcher
from ..dispatch import PruneDispatcher
from ..schemas import PruneResult

router = APIRouter(tags=["prune"])
logger = logging.getLogger(__name__)


@router.post("/api/prune", response_model=PruneResult)
def manual_prune(
    instance: str | None = Query(default=None),
    dispatcher: PruneDispatcher = Depends(get_dispatcher),
):
    """Dispara el prune en el agente y, si tuvo éxito, elimina su métrica.

    - 400 si falta `instance`
    - 502 si el agente no responde o responde no-2xx (store intacto)
    """
    instance_id = (instance or "").strip()
    if not instance_id:
        raise HTTPException(status_code=400, detail="instance param required")

    logger.info("[WEB] Manual prune for %s", instance_id)
    outcome = dispatcher.dispatch(instance_id)

    if not outcome.succeeded:
        # No exponer detalles internos al cliente; el motivo queda en el log
        detail = "Agent error" if outcome.agent_responded else "Failed to call agent"
        raise HTTPException(status_code=502, detail=detail)

    return PruneResult(instance_id=instance_id, evicted=outcome.evicted)
