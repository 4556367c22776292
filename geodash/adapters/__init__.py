"""Adapter package for external I/O implementations.

Purpose:
    Concrete implementations of the domain ports: the async HTTP client for
    the data API, in-memory session history and the keyboard fan-out.

Dependencies:
    ``dashboard_rest`` depends on ``httpx``; the other modules are pure Python.
"""
