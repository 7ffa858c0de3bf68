"""Domain model and chart preparation: resampling, encoding, request building."""
