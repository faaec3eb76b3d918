from __future__ import annotations

from typing import Callable
from unittest.mock import MagicMock

import pytest

from common.config import CollectorSettings
from collector_api.snapshots import Snapshot, SnapshotStore


@pytest.fixture
def store() -> SnapshotStore:
    """Store aislado por test."""
    return SnapshotStore()


@pytest.fixture
def make_snapshot() -> Callable[..., Snapshot]:
    def _make(
        instance_id: str = "h1",
        images_size_gb: float = 12.5,
        timestamp: str = "2024-01-01T00:00:00Z",
        prune_action: bool = False,
    ) -> Snapshot:
        return Snapshot.from_report(instance_id, images_size_gb, timestamp, prune_action)

    return _make


@pytest.fixture
def collector_settings() -> CollectorSettings:
    return CollectorSettings(
        host="127.0.0.1",
        port=3000,
        retention_seconds=24 * 3600,
        sweep_interval_seconds=1800,
        agent_scheme="http",
        agent_port=8080,
        agent_connect_timeout_seconds=1,
        agent_read_timeout_seconds=1,
        log_level="INFO",
    )


@pytest.fixture
def mock_agent_client() -> MagicMock:
    """Mock del AgentClient (prune exitoso por default)."""
    client = MagicMock()
    client.trigger_prune = MagicMock(return_value=200)
    client.resolve_url = MagicMock(side_effect=lambda i: f"http://{i}:8080/prune")
    return client
