"""Core Layer: pure subscription logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, models/ or db/
    - All functions are pure and deterministic
    - No logging in core/: the service layer logs around core calls

Design Decisions:
    - Functional core separated from imperative shell: the store is reached only
      through the SubscriptionRepository protocol
"""
