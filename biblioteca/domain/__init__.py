"""Domain types, form rules and the error taxonomy."""
