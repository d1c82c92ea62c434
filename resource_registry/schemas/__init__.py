"""Request and record schemas."""
