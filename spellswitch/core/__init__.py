"""Event plumbing, scheduling and the language auto-switcher."""
