"""Session handling for signed-in users."""
