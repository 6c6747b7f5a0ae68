"""HTTP API for the overtime analysis tool."""
