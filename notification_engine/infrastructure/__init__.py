"""Infrastructure layer: persistence and channel providers."""
