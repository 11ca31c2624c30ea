"""Domain layer: enums, models and error types."""
