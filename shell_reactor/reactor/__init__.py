"""Event-to-command reaction pipeline."""
