from classquiz.core.config import Settings


def make(**kwargs):
    return Settings(
        _env_file=None,
        SUPABASE_URL="http://localhost:54321",
        SUPABASE_SERVICE_ROLE_KEY="key",
        **kwargs,
    )


def test_defaults():
    settings = make()
    assert settings.API_V1_PREFIX == "/api/v1"
    assert settings.REDIS_URL is None
    assert settings.LEADERBOARD_LIMIT == 100


def test_origins_from_comma_or_semicolon_string():
    settings = make(FRONTEND_ORIGINS="http://a.test, http://b.test;http://c.test")
    assert settings.FRONTEND_ORIGINS == ["http://a.test", "http://b.test", "http://c.test"]


def test_origins_from_json_array():
    settings = make(FRONTEND_ORIGINS='["http://a.test","http://b.test"]')
    assert settings.FRONTEND_ORIGINS == ["http://a.test", "http://b.test"]
