"""Application use cases grouped by resource."""
