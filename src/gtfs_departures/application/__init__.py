"""Application layer - departure resolution, matching and aggregation."""
