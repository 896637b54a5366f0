"""Cash position projections."""
