"""Core runtime services for bz."""
