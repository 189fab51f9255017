"""Domain services: tokenization of sensitive columns and user edits."""
