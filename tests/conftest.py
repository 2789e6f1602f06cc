# tests/conftest.py
import os
import tempfile

# must be set before classgroups.config.settings is imported
_DB_DIR = tempfile.mkdtemp(prefix="classgroups-test-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ.setdefault("ENV", "test")

import pytest
from httpx import ASGITransport, AsyncClient

from classgroups.infrastructure.db.session import create_tables, drop_tables
from classgroups.main import app


@pytest.fixture
async def client():
    await create_tables()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    await drop_tables()
