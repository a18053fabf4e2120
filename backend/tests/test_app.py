import httpx
from sqlalchemy import inspect

from clausecheck.config import Settings
from clausecheck.container import build_container
from clausecheck.main import create_app


def _settings(tmp_path, **overrides):
    values = dict(
        _env_file=None,
        app_env="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'app.db'}",
        llm_provider="fake",
        storage_backend="local",
        local_storage_dir=str(tmp_path / "uploads"),
    )
    values.update(overrides)
    return Settings(**values)


async def test_lifespan_creates_tables_when_enabled(tmp_path):
    settings = _settings(tmp_path, db_auto_create=True)
    container = build_container(settings)
    app = create_app(settings, container)

    async with app.router.lifespan_context(app):
        async with container.engine.connect() as conn:
            tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())

    assert "analysis" in tables


async def test_openapi_is_served_under_the_api_prefix(tmp_path):
    settings = _settings(tmp_path)
    app = create_app(settings, build_container(settings))

    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as c:
        resp = await c.get("/api/openapi.json")

    assert resp.status_code == 200
    paths = resp.json()["paths"]
    assert "/api/analyze-contract" in paths
    assert "/api/analyses/{analysis_id}" in paths
    await app.state.container.aclose()


async def test_cors_origins_from_settings(tmp_path):
    settings = _settings(tmp_path, cors_allow_origins="http://localhost:8081, https://app.example.com")
    app = create_app(settings, build_container(settings))

    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as c:
        resp = await c.options(
            "/api/analyze-contract",
            headers={"Origin": "https://app.example.com", "Access-Control-Request-Method": "POST"},
        )

    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "https://app.example.com"
    assert settings.cors_origins == ["http://localhost:8081", "https://app.example.com"]
    await app.state.container.aclose()


async def test_create_app_builds_its_own_container(tmp_path):
    app = create_app(_settings(tmp_path))

    assert app.state.container.extractor.name == "fake"
    assert app.state.container.storage.name == "local"
    await app.state.container.aclose()
