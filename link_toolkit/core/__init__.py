"""GUI-agnostic core of the link toolkit (models, services, scheduling)."""
