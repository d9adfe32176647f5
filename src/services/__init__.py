"""Business logic services used by handlers.

Services that build AWS clients are imported lazily by handlers so a cold
start only pays for the clients a command actually needs.
"""
