"""Domain layer: models and calculation engines."""
