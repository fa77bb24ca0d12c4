"""Web API for Trader's Journal (FastAPI)."""
