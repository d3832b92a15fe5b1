"""Infrastructure layer — logging setup and the substitution file loader."""
