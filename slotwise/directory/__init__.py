"""Staff and service administration."""
