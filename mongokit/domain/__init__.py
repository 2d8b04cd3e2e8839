"""Domain layer - document models and exceptions."""
