"""HTTP API for ActionGraph (FastAPI)."""
