"""HTTP surface for the CheckKit core."""
