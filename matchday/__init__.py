"""Matchday dashboard: API-Football cache, sync job, HTTP API and dashboard."""

__version__ = "1.0.0"
