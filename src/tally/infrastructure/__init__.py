"""Infrastructure layer: data sources, persistence and ingestion."""
