"""
streamwire: compile declarative streaming execution plans into wired topologies.

Components declare the named streams they read and write; streamwire derives
which component feeds which and registers the resulting graph with an
execution runtime.
"""

__version__ = "0.1.0"
