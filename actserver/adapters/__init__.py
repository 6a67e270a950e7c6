"""Concrete transports for the ports."""
