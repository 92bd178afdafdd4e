"""Domain layer: record model, change engine and batch transformation."""
