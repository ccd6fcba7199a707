"""Domain layer: provenance model, ports and the reconciliation core."""
