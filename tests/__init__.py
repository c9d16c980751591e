"""
normdb Test Suite.

This package contains:
- unit/: Unit tests, one module per component
- integration/: Model-level flows across builder, commits and resolution
"""
