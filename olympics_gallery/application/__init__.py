"""Application layer: business services."""
