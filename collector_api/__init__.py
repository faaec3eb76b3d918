"""Collector de métricas Docker (store en memoria + prune remoto)."""
