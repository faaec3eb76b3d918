from __future__ import annotations

import os
import socket
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


def _default_env_file() -> str:
    repo_root = Path(__file__).resolve().parents[1]
    return str(repo_root / ".env")


def _load_env_file() -> None:
    # El archivo .env es opcional; las variables reales del entorno tienen prioridad.
    env_file = os.getenv("DOCKER_STATS_ENV_FILE", _default_env_file())
    if env_file and Path(env_file).exists():
        load_dotenv(env_file, override=False)


def detect_instance_id() -> str:
    """Identificador del agente: INSTANCE_ID o, en su defecto, el hostname."""
    explicit = os.getenv("INSTANCE_ID", "").strip()
    if explicit:
        return explicit
    try:
        host = socket.gethostname()
    except OSError:
        return "unknown-host"
    return host or "unknown-host"


@dataclass(frozen=True)
class CollectorSettings:
    host: str
    port: int

    # Retención de métricas y frecuencia de limpieza (independientes)
    retention_seconds: float
    sweep_interval_seconds: float

    # Convención para resolver el agente: {scheme}://{instance_id}:{port}/prune
    agent_scheme: str
    agent_port: int
    agent_connect_timeout_seconds: float
    agent_read_timeout_seconds: float

    log_level: str


@dataclass(frozen=True)
class AgentSettings:
    instance_id: str
    remote_server_url: str
    docker_api_version: str

    host: str
    port: int

    stats_interval_seconds: float
    prune_interval_seconds: float
    report_timeout_seconds: float

    log_level: str


def get_collector_settings() -> CollectorSettings:
    _load_env_file()

    return CollectorSettings(
        host=os.getenv("COLLECTOR_HOST", "0.0.0.0"),
        port=int(os.getenv("COLLECTOR_PORT", "3000")),
        retention_seconds=float(os.getenv("STATS_RETENTION_SECONDS", str(24 * 3600))),
        sweep_interval_seconds=float(os.getenv("SWEEP_INTERVAL_SECONDS", str(30 * 60))),
        agent_scheme=os.getenv("AGENT_SCHEME", "http"),
        agent_port=int(os.getenv("AGENT_PORT", "8080")),
        agent_connect_timeout_seconds=float(os.getenv("AGENT_CONNECT_TIMEOUT_SECONDS", "3")),
        agent_read_timeout_seconds=float(os.getenv("AGENT_READ_TIMEOUT_SECONDS", "10")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


def get_agent_settings() -> AgentSettings:
    _load_env_file()

    return AgentSettings(
        instance_id=detect_instance_id(),
        remote_server_url=os.getenv(
            "REMOTE_SERVER_URL", "http://localhost:3000/api/docker-stats"
        ),
        docker_api_version=os.getenv("DOCKER_API_VERSION", "1.41"),
        host=os.getenv("AGENT_HOST", "0.0.0.0"),
        port=int(os.getenv("AGENT_PORT", "8080")),
        stats_interval_seconds=float(os.getenv("STATS_INTERVAL_SECONDS", "3600")),
        prune_interval_seconds=float(os.getenv("PRUNE_INTERVAL_SECONDS", str(24 * 3600))),
        report_timeout_seconds=float(os.getenv("REPORT_TIMEOUT_SECONDS", "10")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
