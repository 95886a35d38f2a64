"""Event server: bounded in-memory store, ingestion, projections, views."""
