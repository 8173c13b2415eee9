"""Services Layer - entity repository and the domain operations built on it.

Invariants:
    - Every operation opens its own session; no session outlives one operation
    - Multi-row writes run inside DatabaseSessionManager.transaction()
"""
