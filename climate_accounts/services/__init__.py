"""Integrations with the durable user store and the session cache."""
