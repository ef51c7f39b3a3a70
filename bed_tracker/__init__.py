"""Hospital bed occupancy tracking service."""
