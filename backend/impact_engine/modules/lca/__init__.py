"""Product life-cycle impact aggregation."""
