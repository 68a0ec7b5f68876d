"""Newport whale count ingestion service."""
