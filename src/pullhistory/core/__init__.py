"""Core domain: models, ports and ingestion logic."""
