"""Matrix quick order: variant-grid draft order entry."""
