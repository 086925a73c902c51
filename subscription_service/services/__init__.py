"""Services Layer: orchestration of core logic around the record store.

Invariants:
    - Services call pure core functions before any repository method
    - update is the one read-modify-write: read_record, then update_record
    - All logging for subscription operations happens here, never in core/
"""
