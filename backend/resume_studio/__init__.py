"""Resume Studio backend: resume profiles, AI import/scoring and print preview."""
