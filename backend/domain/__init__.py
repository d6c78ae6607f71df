"""Domain layer: blob storage, retention, errors and events."""
