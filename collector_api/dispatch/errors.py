"""Excepciones del dispatch de prune hacia los agentes."""

from __future__ import annotations

from typing import Optional


class AgentDispatchError(Exception):
    """Fallo al disparar el prune remoto en un agente."""

    def __init__(self, instance_id: str, message: str):
        self.instance_id = instance_id
        super().__init__(f"Agent '{instance_id}': {message}")


class AgentUnreachableError(AgentDispatchError):
    """Error de red, timeout o URL inválida: el agente no respondió."""


class AgentResponseError(AgentDispatchError):
    """El agente respondió con un status no-2xx."""

    def __init__(self, instance_id: str, status_code: int, body: Optional[str] = None):
        self.status_code = status_code
        self.body = body
        super().__init__(instance_id, f"returned status {status_code}")
