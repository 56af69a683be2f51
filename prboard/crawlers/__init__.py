"""GitHub reads and persistence stages for the refresh pipeline."""
