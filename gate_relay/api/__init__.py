"""HTTP API for the gate relay."""
