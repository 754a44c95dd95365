"""Core primitives: tokens, cancellation errors, retry."""
