"""
Shared helpers: logging, batching, SQL escaping, async bridging.
"""
