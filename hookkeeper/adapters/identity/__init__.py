"""Instance identity adapters."""
