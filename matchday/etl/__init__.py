"""ETL module for data extraction, transformation, and loading."""

from matchday.etl.api_football import APIFootballClient
from matchday.etl.pipeline import ETLPipeline, sync_today_fixtures

__all__ = [
    "APIFootballClient",
    "ETLPipeline",
    "sync_today_fixtures",
]
