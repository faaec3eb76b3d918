"""Agente: mide el uso de imágenes Docker local, lo reporta y hace prune."""
