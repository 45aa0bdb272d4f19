"""Configuration layer — settings sources, TOML discovery, and logging."""
