from backend.config import ROOT_DIR, Settings, env_template, get_settings


def test_settings_read_vendor_environment():
    settings = get_settings()

    assert settings.vika_token == "test-token"
    assert settings.vika_datasheet_id == "dstTest"
    assert settings.vika_view_id == "viwTest"
    assert settings.vika_base_url == "https://api.vika.cn/fusion/v1"
    assert settings.upload_max_bytes == 10 * 1024 * 1024


def test_port_and_cors_from_environment(monkeypatch):
    monkeypatch.setenv("PORT", "8081")
    monkeypatch.setenv("CORS_ORIGINS", "http://localhost:5173, http://example.test")

    settings = Settings(_env_file=None)

    assert settings.api_port == 8081
    assert settings.cors_origins == [
        "http://localhost:5173",
        "http://example.test",
    ]


def test_cors_wildcard_from_environment(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", "*")
    assert Settings(_env_file=None).cors_origins == ["*"]


def test_relative_directories_resolve_against_repo(monkeypatch):
    monkeypatch.setenv("UPLOAD_DIR", "var/uploads")

    settings = Settings(_env_file=None)

    assert settings.upload_dir == ROOT_DIR / "var" / "uploads"
    assert settings.static_dir == ROOT_DIR / "public"


def test_generated_env_template_loads(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(env_template())

    settings = Settings(_env_file=env_file)

    assert settings.cors_origins == ["*"]
    assert settings.api_port == 3000
    assert settings.upload_dir == ROOT_DIR / "uploads"
    assert settings.static_dir == ROOT_DIR / "public"
    assert settings.create_retry_attempts == 3
    assert "VIKA_TOKEN=\n" in env_file.read_text()


def test_worst_case_create_latency():
    settings = Settings(
        _env_file=None,
        vika_timeout=60,
        vika_request_retries=5,
        vika_retry_delay=3,
        create_retry_attempts=3,
        create_retry_delay=2,
    )

    # 3 attempts * (6 * 60s + 5 * 3s) + 2 * 2s
    assert settings.worst_case_create_seconds() == 3 * 375 + 4


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
