"""Review use cases kept independent of FastAPI."""
