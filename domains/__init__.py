"""Domain modules for the reminder scheduler."""
