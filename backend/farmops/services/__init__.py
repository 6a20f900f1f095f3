"""Services Layer — database-backed workflows shared by routes.

Invariants:
    - Services receive an AsyncSession and client handles; they never build their own
    - Domain failures raised as FarmOpsError subclasses, never HTTPException
"""
