"""Dashboard statistics calculated from a state snapshot."""
