"""Idearoom dashboard backend (reviews domain, web adapter, tools)."""
