"""G-code emission and operation checks."""
