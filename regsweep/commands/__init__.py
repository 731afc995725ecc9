"""Click command handlers for regsweep."""
