"""FastAPI adapter for the review dashboard."""
