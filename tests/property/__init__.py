# tests/property/__init__.py
"""Property-based tests for streamwire.

Property-based testing validates invariants that must hold for ALL plans,
not just the specific examples we think of. Wiring must be complete,
justified edge by edge, and identical across repeated builds.

Test categories:
- core/: Edge resolution, grouping selection, build determinism
"""
