"""API Resilience Implementations.

Contains the throttled invoker that honours the server's advisory delay
and serializes calls per client session.
Bounded Context: API Resilience
"""
