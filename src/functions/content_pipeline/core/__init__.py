"""Core components of the content pipeline."""
