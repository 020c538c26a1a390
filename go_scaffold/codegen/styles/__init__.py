"""Built-in architecture styles."""
