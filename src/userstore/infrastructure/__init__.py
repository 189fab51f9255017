"""Infrastructure adapters for storage and the token vault."""
