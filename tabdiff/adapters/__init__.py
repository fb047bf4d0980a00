"""Record source and report sink adapters."""
