"""Semantic type aliases for compile-time type safety.

NewType creates distinct types that mypy treats as incompatible,
preventing accidental misuse of semantically different string values.
"""

from typing import NewType

ComponentName = NewType("ComponentName", str)
"""Unique component name within a plan (e.g., 'filter_bolt', 'trigger_spout_tick')"""

StreamId = NewType("StreamId", str)
"""Stream identifier parsed from a stream definition (e.g., 'StockStream')"""
