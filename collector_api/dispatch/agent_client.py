"""Cliente HTTP hacia los agentes (collector -> agent)."""

from __future__ import annotations

import logging
from typing import Optional, Tuple

import requests
from urllib3.exceptions import LocationValueError

from .errors import AgentResponseError, AgentUnreachableError

logger = logging.getLogger(__name__)


class AgentClient:
    """Dispara el prune remoto en un agente.

    El agente se resuelve por convención de nombre:
    {scheme}://{instance_id}:{port}/prune (sin registro ni health check previo).

    Una sola llamada por request, sin reintentos. La espera está acotada por
    (connect_timeout, read_timeout).
    """

    def __init__(
        self,
        port: int = 8080,
        scheme: str = "http",
        connect_timeout: float = 3.0,
        read_timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self._port = port
        self._scheme = scheme
        self._timeout: Tuple[float, float] = (connect_timeout, read_timeout)
        self._session = session or requests.Session()

    def resolve_url(self, instance_id: str) -> str:
        return f"{self._scheme}://{instance_id}:{self._port}/prune"

    def trigger_prune(self, instance_id: str) -> int:
        """POST sin body al endpoint /prune del agente.

        Returns:
            Status code 2xx devuelto por el agente

        Raises:
            AgentUnreachableError: Error de red, timeout o URL inválida
            AgentResponseError: El agente respondió con status no-2xx
        """
        url = self.resolve_url(instance_id)

        try:
            response = self._session.post(url, timeout=self._timeout)
        except (requests.RequestException, LocationValueError) as e:
            # LocationValueError: urllib3 no puede parsear el host (ej. "a..b", label > 63)
            logger.warning("[DISPATCH] Error calling agent %s: %s", url, e)
            raise AgentUnreachableError(instance_id, f"{type(e).__name__}: {e}") from e

        try:
            if not 200 <= response.status_code < 300:
                logger.warning("[DISPATCH] Agent %s returned %d", url, response.status_code)
                raise AgentResponseError(instance_id, response.status_code, response.text[:200])
            return response.status_code
        finally:
            response.close()

    def close(self) -> None:
        self._session.close()
