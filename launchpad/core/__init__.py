"""Core (pure) library layer.

This package is intended to be safe to import from:
- pipeline steps
- CLI entrypoints
- the web app
- tests

It should not perform network or subprocess work at import time.
"""
