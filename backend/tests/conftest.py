import httpx
import pytest
import pytest_asyncio
from sqlalchemy import func, select

from clausecheck.config import get_settings, Settings
from clausecheck.container import build_container
from clausecheck.db.session import create_all
from clausecheck.main import create_app
from clausecheck.models import Analysis
from clausecheck.services.llm import FakeTextExtractor, KeywordRiskClassifier
from clausecheck.services.storage import LocalObjectStorage

AUTO_RENEW_CONTRACT = (
    "Membership Agreement. This agreement will automatically renew for successive "
    "12-month terms unless you cancel in writing 30 days before the renewal date. "
    "A processing fee of $49.99 is charged at each renewal. "
    "Any dispute will be resolved by binding arbitration."
)


class RecordingExtractor(FakeTextExtractor):
    def __init__(self, text=None, error=None):
        super().__init__(text)
        self.error = error
        self.calls = 0

    async def extract_text(self, image, mime_type):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return await super().extract_text(image, mime_type)


class RecordingClassifier(KeywordRiskClassifier):
    def __init__(self, error=None):
        self.error = error
        self.received = []

    @property
    def calls(self):
        return len(self.received)

    async def classify(self, text):
        self.received.append(text)
        if self.error is not None:
            raise self.error
        return await super().classify(text)


class RecordingStorage(LocalObjectStorage):
    def __init__(self, *args, fail_upload=False, **kwargs):
        super().__init__(*args, **kwargs)
        self.fail_upload = fail_upload
        self.uploaded = []
        self.deleted = []

    @property
    def calls(self):
        return len(self.uploaded) + len(self.deleted)

    async def upload(self, key, data, content_type=None):
        if self.fail_upload:
            raise ConnectionError("storage unavailable")
        self.uploaded.append(key)
        return await super().upload(key, data, content_type)

    async def delete(self, key):
        self.deleted.append(key)
        await super().delete(key)


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        app_env="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        llm_provider="fake",
        storage_backend="local",
        local_storage_dir=str(tmp_path / "uploads"),
        public_base_url="http://test",
        storage_signing_secret="test-secret",
    )


@pytest.fixture
def extractor():
    return RecordingExtractor()


@pytest.fixture
def classifier():
    return RecordingClassifier()


@pytest.fixture
def storage(settings):
    return RecordingStorage(
        root_dir=settings.local_storage_dir,
        public_base_url=settings.public_base_url,
        files_path=f"{settings.api_prefix}/files",
        signing_secret=settings.storage_signing_secret,
        ttl_seconds=settings.signed_url_ttl_seconds,
    )


@pytest_asyncio.fixture
async def container(settings, extractor, classifier, storage):
    c = build_container(settings, extractor=extractor, classifier=classifier, storage=storage)
    await create_all(c.engine)
    yield c
    await c.aclose()


@pytest.fixture
def app(settings, container):
    return create_app(settings, container)


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def count_analyses(container):
    async def _count():
        async with container.session_factory() as session:
            result = await session.execute(select(func.count()).select_from(Analysis))
            return result.scalar_one()

    return _count


@pytest.fixture
def auto_renew_contract():
    return AUTO_RENEW_CONTRACT.encode("utf-8")
