"""Tests del dispatch de prune (controller + cliente HTTP hacia agentes)."""

from unittest.mock import MagicMock

import pytest
import requests

from collector_api.dispatch import (
    AgentClient,
    AgentResponseError,
    AgentUnreachableError,
    DispatchState,
    PruneDispatcher,
)


def _response(status_code: int, text: str = "") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    return response


# =============================================================================
# PruneDispatcher
# =============================================================================

class TestPruneDispatcher:
    def test_success_evicts_entry(self, store, make_snapshot, mock_agent_client):
        store.upsert(make_snapshot(instance_id="h2"))
        dispatcher = PruneDispatcher(store, mock_agent_client)

        outcome = dispatcher.dispatch("h2")

        assert outcome.succeeded is True
        assert outcome.state == DispatchState.SUCCEEDED
        assert outcome.evicted is True
        assert "h2" not in store
        mock_agent_client.trigger_prune.assert_called_once_with("h2")

    def test_success_without_entry(self, store, mock_agent_client):
        outcome = PruneDispatcher(store, mock_agent_client).dispatch("ghost")

        assert outcome.succeeded is True
        assert outcome.evicted is False
        assert store.list() == []

    @pytest.mark.parametrize(
        "error",
        [
            AgentUnreachableError("h1", "ConnectionError: refused"),
            AgentResponseError("h1", 500, "boom"),
        ],
    )
    def test_failure_leaves_store_untouched(self, store, make_snapshot, mock_agent_client, error):
        before = make_snapshot(instance_id="h1")
        store.upsert(before)
        mock_agent_client.trigger_prune.side_effect = error

        outcome = PruneDispatcher(store, mock_agent_client).dispatch("h1")

        assert outcome.succeeded is False
        assert outcome.state == DispatchState.FAILED
        assert outcome.reason
        assert store.get("h1") is before
        assert store.get("h1").to_dict() == before.to_dict()

    def test_failure_reports_agent_status(self, store, mock_agent_client):
        mock_agent_client.trigger_prune.side_effect = AgentResponseError("h1", 503)

        outcome = PruneDispatcher(store, mock_agent_client).dispatch("h1")

        assert outcome.status_code == 503
        assert outcome.agent_responded is True

    def test_exactly_one_attempt(self, store, mock_agent_client):
        mock_agent_client.trigger_prune.side_effect = AgentUnreachableError("h1", "timeout")

        PruneDispatcher(store, mock_agent_client).dispatch("h1")

        assert mock_agent_client.trigger_prune.call_count == 1

    def test_fresh_ingest_during_dispatch_is_kept(self, store, make_snapshot, mock_agent_client):
        store.upsert(make_snapshot(instance_id="h1", timestamp="2024-01-01T00:00:00Z"))
        fresh = make_snapshot(
            instance_id="h1", images_size_gb=0.0, timestamp="2024-01-01T00:01:00Z", prune_action=True
        )

        def prune_and_report(instance_id):
            # El agente reporta el resultado del prune antes de que el collector limpie
            store.upsert(fresh)
            return 200

        mock_agent_client.trigger_prune.side_effect = prune_and_report

        outcome = PruneDispatcher(store, mock_agent_client).dispatch("h1")

        assert outcome.succeeded is True
        assert outcome.evicted is False
        assert store.get("h1") is fresh


# =============================================================================
# AgentClient
# =============================================================================

class TestAgentClient:
    def test_resolve_url_by_convention(self):
        client = AgentClient(port=8080)
        assert client.resolve_url("my-host-123") == "http://my-host-123:8080/prune"

    def test_success_posts_without_body_with_timeout(self):
        session = MagicMock()
        session.post.return_value = _response(200)
        client = AgentClient(port=9000, connect_timeout=2, read_timeout=5, session=session)

        assert client.trigger_prune("h1") == 200

        session.post.assert_called_once_with("http://h1:9000/prune", timeout=(2, 5))

    @pytest.mark.parametrize("status", [201, 204, 299])
    def test_any_2xx_is_success(self, status):
        session = MagicMock()
        session.post.return_value = _response(status)

        assert AgentClient(session=session).trigger_prune("h1") == status

    @pytest.mark.parametrize("status", [301, 404, 500, 502])
    def test_non_2xx_raises_response_error(self, status):
        session = MagicMock()
        session.post.return_value = _response(status, "nope")

        with pytest.raises(AgentResponseError) as exc_info:
            AgentClient(session=session).trigger_prune("h1")

        assert exc_info.value.status_code == status
        assert exc_info.value.instance_id == "h1"

    @pytest.mark.parametrize(
        "exc",
        [
            requests.ConnectionError("refused"),
            requests.Timeout("slow"),
            requests.exceptions.InvalidURL("bad host"),
        ],
    )
    def test_network_errors_raise_unreachable(self, exc):
        session = MagicMock()
        session.post.side_effect = exc

        with pytest.raises(AgentUnreachableError):
            AgentClient(session=session).trigger_prune("h1")

    @pytest.mark.parametrize("instance_id", ["a..b", "a" * 70])
    def test_unparseable_host_raises_unreachable(self, instance_id):
        """Hosts que urllib3 no puede parsear (label vacío o > 63 chars)."""
        client = AgentClient(connect_timeout=0.5, read_timeout=0.5)
        try:
            with pytest.raises(AgentUnreachableError) as exc_info:
                client.trigger_prune(instance_id)
        finally:
            client.close()

        assert exc_info.value.instance_id == instance_id

    def test_close_closes_session(self):
        session = MagicMock()
        AgentClient(session=session).close()
        session.close.assert_called_once()
