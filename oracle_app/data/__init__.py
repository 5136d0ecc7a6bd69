"""
Feed registry and rolling price history.

Holds the immutable domain models shared by every component, the static
instrument registry and the bounded per-instrument history buffers.
"""
