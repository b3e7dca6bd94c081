"""
Core package for shared utilities.

Configuration, structured logging, the error taxonomy and token verification
used across the records core and its HTTP layer.
"""
