"""Makes the namespace packages under duo/ importable when running pytest from a source checkout."""
