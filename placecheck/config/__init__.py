"""Configuration: settings, API keys, logging and source-quality tables."""
