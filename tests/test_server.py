"""Tests del arranque HTTP: bind explícito y fallo fatal si el puerto está ocupado."""

import logging
import socket

import pytest

from common.config import AgentSettings, CollectorSettings
from common.server import bind_listen_socket


@pytest.fixture
def busy_port():
    """Puerto ocupado por un socket en listen durante el test."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    sock.listen(1)
    try:
        yield sock.getsockname()[1]
    finally:
        sock.close()


class TestBindListenSocket:
    def test_binds_free_port(self):
        sock = bind_listen_socket("127.0.0.1", 0)
        try:
            host, port = sock.getsockname()[:2]
            assert host == "127.0.0.1"
            assert port > 0
        finally:
            sock.close()

    def test_busy_port_raises(self, busy_port):
        with pytest.raises(OSError):
            bind_listen_socket("127.0.0.1", busy_port)


class TestStartupFailure:
    def test_collector_exits_when_port_busy(self, monkeypatch, caplog, busy_port):
        from collector_api import main as collector_main

        settings = CollectorSettings(
            host="127.0.0.1",
            port=busy_port,
            retention_seconds=24 * 3600,
            sweep_interval_seconds=1800,
            agent_scheme="http",
            agent_port=8080,
            agent_connect_timeout_seconds=1,
            agent_read_timeout_seconds=1,
            log_level="INFO",
        )
        monkeypatch.setattr(collector_main, "get_collector_settings", lambda: settings)
        served = []
        monkeypatch.setattr(collector_main, "serve", lambda *a, **kw: served.append(a))

        with caplog.at_level(logging.CRITICAL), pytest.raises(SystemExit) as exc_info:
            collector_main.main()

        assert exc_info.value.code == 1
        assert served == []
        assert "[FATAL] Collector HTTP server failed" in caplog.text

    def test_agent_exits_before_touching_docker(self, monkeypatch, caplog, busy_port):
        from agent import main as agent_main

        settings = AgentSettings(
            instance_id="h1",
            remote_server_url="http://localhost:3000/api/docker-stats",
            docker_api_version="1.41",
            host="127.0.0.1",
            port=busy_port,
            stats_interval_seconds=3600,
            prune_interval_seconds=86400,
            report_timeout_seconds=1,
            log_level="INFO",
        )
        monkeypatch.setattr(agent_main, "get_agent_settings", lambda: settings)

        def no_docker(*args, **kwargs):
            raise AssertionError("Docker client must not be created")

        monkeypatch.setattr(agent_main, "DockerStatsCollector", no_docker)

        with caplog.at_level(logging.CRITICAL), pytest.raises(SystemExit) as exc_info:
            agent_main.main()

        assert exc_info.value.code == 1
        assert "[FATAL] Agent HTTP server failed" in caplog.text
