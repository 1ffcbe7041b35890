"""Relayer HTTP listener (FastAPI)."""
