"""Infrastructure layer: persistence and object storage."""
