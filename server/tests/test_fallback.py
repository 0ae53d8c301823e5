from services.fallback import with_fallback


async def succeed():
    return "primary"


async def fail():
    raise ConnectionError("database down")


async def test_returns_primary_result():
    assert await with_fallback(succeed(), "fallback") == "primary"


async def test_returns_fallback_and_reports_error():
    errors = []

    result = await with_fallback(fail(), "fallback", on_error=errors.append)

    assert result == "fallback"
    assert len(errors) == 1
    assert isinstance(errors[0], ConnectionError)


async def test_default_hook_logs_warning(caplog):
    with caplog.at_level("WARNING", logger="telemetry_server"):
        assert await with_fallback(fail(), []) == []
    assert "database down" in caplog.text
