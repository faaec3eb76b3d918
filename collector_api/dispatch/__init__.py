"""Dispatch del prune manual hacia los agentes."""

from .agent_client import AgentClient
from .controller import DispatchOutcome, DispatchState, PruneDispatcher
from .errors import AgentDispatchError, AgentResponseError, AgentUnreachableError

__all__ = [
    "AgentClient",
    "DispatchOutcome",
    "DispatchState",
    "PruneDispatcher",
    "AgentDispatchError",
    "AgentResponseError",
    "AgentUnreachableError",
]
