"""Acceso a Docker del agente: tamaño de imágenes y prune.

Usa docker SDK (docker-py). El cliente se crea con la versión de API
configurada (DOCKER_API_VERSION) contra el socket local.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

import docker
from docker.errors import DockerException

logger = logging.getLogger(__name__)

BYTES_PER_GB = 1024.0 * 1024.0 * 1024.0


class DockerStatsError(Exception):
    """Error al consultar o modificar el Docker Engine local."""


@dataclass
class PruneReport:
    """Resumen de un prune (contenedores detenidos + imágenes dangling)."""
    containers_deleted: List[str] = field(default_factory=list)
    images_deleted: List[str] = field(default_factory=list)
    space_reclaimed_bytes: int = 0

    @property
    def space_reclaimed_gb(self) -> float:
        return self.space_reclaimed_bytes / BYTES_PER_GB


class DockerStatsCollector:
    """Mide y limpia el almacenamiento de imágenes Docker local."""

    def __init__(self, api_version: str = "1.41", raw_client: Any | None = None) -> None:
        self._api_version = api_version
        self._client = raw_client or self._create_client()

    def _create_client(self) -> Any:
        try:
            return docker.from_env(version=self._api_version)
        except DockerException as exc:
            logger.error("[AGENT] Docker client init error (api=%s): %s", self._api_version, exc)
            raise DockerStatsError(str(exc)) from exc

    def images_size_gb(self) -> float:
        """Suma el tamaño de todas las imágenes locales, en GB."""
        try:
            images = self._client.images.list()
        except DockerException as exc:
            raise DockerStatsError(f"image list failed: {exc}") from exc

        total_size = 0
        for image in images:
            attrs = getattr(image, "attrs", {}) or {}
            total_size += int(attrs.get("Size", 0) or 0)
        return total_size / BYTES_PER_GB

    def prune(self) -> PruneReport:
        """Elimina contenedores detenidos y luego imágenes dangling."""
        try:
            containers = self._client.containers.prune() or {}
            logger.info("[AGENT] ContainersPrune: %s", containers)
            images = self._client.images.prune() or {}
            logger.info("[AGENT] ImagesPrune: %s", images)
        except DockerException as exc:
            raise DockerStatsError(f"prune failed: {exc}") from exc

        return PruneReport(
            containers_deleted=list(containers.get("ContainersDeleted") or []),
            images_deleted=[
                next(iter(item.values()))
                for item in (images.get("ImagesDeleted") or [])
                if isinstance(item, dict) and item
            ],
            space_reclaimed_bytes=int(containers.get("SpaceReclaimed") or 0)
            + int(images.get("SpaceReclaimed") or 0),
        )

    def ping(self) -> bool:
        try:
            self._client.ping()
            return True
        except DockerException as exc:
            logger.error("[AGENT] Docker ping failed: %s", exc)
            return False

    def close(self) -> None:
        close = getattr(self._client, "close", None)
        if close is not None:
            close()
