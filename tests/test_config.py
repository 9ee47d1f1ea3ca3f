from elastictypes.config import Settings


def test_defaults(monkeypatch):
    for var in ["ELASTICTYPES_ELASTIC_HOST", "ELASTICTYPES_ELASTIC_PASSWORD", "ELASTICTYPES_ELASTIC_VERIFY_SSL"]:
        monkeypatch.delenv(var, raising=False)
    settings = Settings()
    assert settings.elastic_host == "http://localhost:9200"
    assert settings.elastic_verify_ssl is False
    assert settings.bulk_batch_size == 1000


def test_from_environment(monkeypatch):
    monkeypatch.setenv("ELASTICTYPES_ELASTIC_HOST", "https://elastic.example.org:9200")
    monkeypatch.setenv("ELASTICTYPES_ELASTIC_PASSWORD", "secret")
    monkeypatch.setenv("ELASTICTYPES_BULK_BATCH_SIZE", "50")
    settings = Settings()
    assert settings.elastic_password == "secret"
    assert settings.elastic_verify_ssl is True
    assert settings.bulk_batch_size == 50

    monkeypatch.delenv("ELASTICTYPES_ELASTIC_HOST")
    assert Settings().elastic_host == "https://localhost:9200"
