"""Interactive editor for the system hosts file."""
