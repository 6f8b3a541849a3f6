"""Domain models, ports and query logic for tiered metrics."""
