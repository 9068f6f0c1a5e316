"""
insurance_kernel -- exceptions, structured logging and domain values shared by
the configuration, engine and service layers.

Nothing in this package reads files, the network or the clock.
"""
