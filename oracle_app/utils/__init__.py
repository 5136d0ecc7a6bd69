"""
Utility functions module.

Fixed-point arithmetic, display formatting and time handling shared across
the engine.

Value Semantics:
- Every price, bound, quantity and cash amount in the core is a plain int
  scaled by 10**18 (WAD), matching the oracle feed encoding
- Conversion to human units happens only at the presentation boundary
- Timestamps are timezone-aware UTC datetimes
"""
