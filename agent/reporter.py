"""Envío de métricas al collector (agent -> collector)."""

from __future__ import annotations

import logging
from typing import Optional

import requests

from .schemas import DockerStatsReport

logger = logging.getLogger(__name__)


class ReportError(Exception):
    """El collector no aceptó el reporte (red, timeout o status no-2xx)."""


class StatsReporter:
    def __init__(
        self,
        remote_server_url: str,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self._url = remote_server_url
        self._timeout = timeout
        self._session = session or requests.Session()

    @property
    def url(self) -> str:
        return self._url

    def send(self, report: DockerStatsReport) -> None:
        """POST JSON del reporte al collector.

        Raises:
            ReportError: Error de red o status no-2xx
        """
        try:
            response = self._session.post(
                self._url,
                json=report.model_dump(),
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise ReportError(f"{type(e).__name__}: {e}") from e

        try:
            if not 200 <= response.status_code < 300:
                raise ReportError(f"non-2xx status code: {response.status_code}")
        finally:
            response.close()

        logger.debug(
            "[AGENT] Report sent: size=%.2fGB prune=%s",
            report.images_size_gb,
            report.prune_action,
        )

    def close(self) -> None:
        self._session.close()
