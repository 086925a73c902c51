"""Subscription Service: subscription records and month-granular cost reporting.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""

SERVICE_NAME = "subscription-service"
__version__ = "1.0.0"
