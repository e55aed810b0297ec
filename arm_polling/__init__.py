"""Shared plumbing for Azure Resource Manager REST clients.

Provides an HTTP pipeline abstraction, the long-running-operation (LRO)
poller used by generated operation wrappers, and a recording harness for
building sanitized test fixtures.
"""

__version__ = "0.1.0"
