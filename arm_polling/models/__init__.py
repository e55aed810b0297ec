"""Typed models exchanged between the poller, clients and callers."""
