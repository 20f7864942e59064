import os
import tempfile

# Must be set before config/database are imported by any test module
_tmp_dir = tempfile.mkdtemp(prefix="termscrape-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_tmp_dir}/test.db"
os.environ["EXPORT_DIR"] = os.path.join(_tmp_dir, "exports")

from unittest.mock import AsyncMock

import pytest

from config import Settings
import models  # noqa: F401  registers the tables on Base.metadata
from database import Base, engine


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def sleep() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
async def db():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
