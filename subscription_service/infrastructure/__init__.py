"""Infrastructure Layer: database access, record store adapter, logging setup.

Invariants:
    - Every SQLAlchemy failure leaves this layer as StoreError (core/errors.py)
    - Store adapters translate core predicate descriptors; they never receive query text
"""
