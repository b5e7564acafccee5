"""Process launching and failure reporting."""
