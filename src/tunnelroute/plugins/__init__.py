"""Transport and diagnostics plugins."""
