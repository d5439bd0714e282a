"""API Resilience Implementations.

Contains the retry policy and the service that applies it to rate-limited
API calls.
Bounded Context: API Resilience
"""
