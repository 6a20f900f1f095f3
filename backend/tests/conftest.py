"""Root conftest — shared test configuration."""

import os

# Ensure tests don't accidentally use real keys or a real database
os.environ.setdefault("ANTHROPIC_API_KEY", "sk-ant-test-fake-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SUPABASE_URL", "https://project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "service-role-test-key")
os.environ.setdefault(
    "SUPABASE_JWT_SECRET", "test-jwt-secret-at-least-thirty-two-bytes-long",
)
