"""Infrastructure abstractions shared across the package."""
