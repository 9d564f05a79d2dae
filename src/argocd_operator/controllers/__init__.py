"""Per-kind external clients plugged into the reconciliation engine."""
