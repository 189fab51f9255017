"""Domain layer: the user record, query options and services."""
