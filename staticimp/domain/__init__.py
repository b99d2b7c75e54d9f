"""Domain layer: configuration model, enums, and exceptions."""
