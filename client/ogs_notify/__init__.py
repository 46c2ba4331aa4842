"""OGS notification client: device registration and diagnostics."""
