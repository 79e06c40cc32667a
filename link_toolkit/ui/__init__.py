"""UI-facing layer of the link toolkit (controllers only, no widgets)."""
