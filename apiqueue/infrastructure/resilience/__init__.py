"""API Resilience Implementations.

Contains the backoff policy used when the quota endpoint itself fails.
Bounded Context: API Resilience
"""
