"""Settings and database configuration."""
