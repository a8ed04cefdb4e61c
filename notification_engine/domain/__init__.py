"""Domain layer: entities, enums, errors and the condition language."""
