"""Cross-cutting managers: logging and caller identity."""
