"""Persistence — atomic file writes."""
