"""Core configuration, logging, errors and query compilation."""
