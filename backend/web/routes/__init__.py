"""API routers: reviews and course lookup."""
