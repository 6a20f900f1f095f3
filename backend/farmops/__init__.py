"""FarmOps Application Package — farm management API over Supabase.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
