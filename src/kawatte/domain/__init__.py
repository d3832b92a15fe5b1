"""Domain layer — substitution pairs and glob filters."""
