"""Arranque de los servidores HTTP (collector y agente).

El socket se abre acá, antes de uvicorn, para que un bind fallido llegue al
caller como OSError y no como un sys.exit interno de uvicorn.
"""

from __future__ import annotations

import socket
from typing import Any

import uvicorn


def bind_listen_socket(host: str, port: int) -> socket.socket:
    """Hace bind de un socket TCP en host:port.

    Raises:
        OSError: Si no se puede hacer bind (puerto ocupado, host inválido, permisos)
    """
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
    except OSError:
        sock.close()
        raise
    sock.set_inheritable(True)
    return sock


def serve(app: Any, sock: socket.socket, log_level: str = "info") -> None:
    """Sirve `app` con uvicorn sobre un socket ya enlazado."""
    host, port = sock.getsockname()[:2]
    config = uvicorn.Config(app, host=host, port=port, log_level=log_level.lower())
    server = uvicorn.Server(config)
    try:
        server.run(sockets=[sock])
    finally:
        sock.close()
