"""Chart configuration models."""
