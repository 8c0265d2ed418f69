import pytest
import sqlalchemy
from databases import Database

from health_trends import config
from health_trends.models import metadata


@pytest.fixture
def make_settings(tmp_path):
    def _make(**overrides):
        values = {
            "DB_URL": f"sqlite:///{tmp_path / 'trends.db'}",
            "GEMINI_API_KEY": "test-key",
            "CRON_SECRET": "s3cret",
            "GEMINI_MODEL": "test-model",
            "GEMINI_BASE_URL": "https://gemini.test/v1beta",
            "LIFESTYLE_FEEDS": ["https://feeds.test/lifestyle.xml"],
            "DISEASE_FEEDS": ["https://feeds.test/disease.xml"],
        }
        values.update(overrides)
        return config.Settings(**values)

    return _make


@pytest.fixture
async def db(tmp_path):
    url = f"sqlite:///{tmp_path / 'trends.db'}"
    engine = sqlalchemy.create_engine(url)
    metadata.create_all(engine)
    engine.dispose()

    database = Database(url)
    await database.connect()
    yield database
    await database.disconnect()
