"""Core Application Layer: the dispatch queue, the rate-limited queue built on
top of it, and the resource-level facade that routes API calls through them.
"""
