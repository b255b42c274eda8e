"""Hook configuration persistence adapters."""
