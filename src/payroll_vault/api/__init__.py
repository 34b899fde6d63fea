"""HTTP API for the payroll vault."""
