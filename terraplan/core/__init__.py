"""Core models and errors for terraplan."""
