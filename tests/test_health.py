"""
Health check endpoint and password utility tests.
"""

import pytest

from src.utils.password import hash_password, verify_password


class TestHealth:
    @pytest.mark.asyncio
    async def test_health_endpoint(self, client):
        response = await client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "salesdesk"}

    @pytest.mark.asyncio
    async def test_readiness_uses_database(self, client):
        response = await client.get("/api/health/ready")
        assert response.json() == {"status": "ready", "database": "connected"}

    @pytest.mark.asyncio
    async def test_liveness(self, client):
        response = await client.get("/api/health/live")
        assert response.json()["status"] == "alive"


def test_password_hashing():
    """Test password hashing utility."""
    password = "test_password_123"
    hashed = hash_password(password)

    # Hash should be different from original
    assert hashed != password

    # Verification should work
    assert verify_password(password, hashed)

    # Wrong password should fail
    assert not verify_password("wrong_password", hashed)
