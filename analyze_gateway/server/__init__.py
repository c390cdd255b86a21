"""HTTP API for the analyze gateway (FastAPI)."""
