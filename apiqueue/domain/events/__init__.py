"""Domain Event definitions.

Represents significant occurrences inside the rate-limited queue (checkpoint
decisions, retries, idling) that logging or callers might react to.
"""
