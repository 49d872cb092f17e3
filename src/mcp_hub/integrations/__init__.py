"""Integrations with systems mcp-hub does not control.

Each integration has an abstract interface (abc.py), a production
implementation (real.py) and an in-memory fake (fake.py).
"""
