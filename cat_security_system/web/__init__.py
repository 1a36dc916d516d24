"""Web interface for the cat security system."""
