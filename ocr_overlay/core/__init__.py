"""UI-agnostic core of the overlay editor."""
