"""Wiki component."""
