from crawlme.errors import CrawlError, NoCandidatesInRadius, ProviderError
from crawlme.http import HttpStatusError


def test_provider_error_keeps_detail_out_of_user_message():
    exc = ProviderError("HTTP 403 from https://routes.googleapis.com")
    assert isinstance(exc, CrawlError)
    assert exc.detail == "HTTP 403 from https://routes.googleapis.com"
    assert exc.user_message == ProviderError.user_message
    assert str(exc) == exc.detail


def test_provider_error_without_detail_uses_generic_message():
    exc = ProviderError()
    assert exc.detail is None
    assert str(exc) == ProviderError.user_message


def test_http_status_error_is_a_provider_error():
    exc = HttpStatusError("https://example.test", 503, {"error": {"status": "UNAVAILABLE"}})
    assert isinstance(exc, ProviderError)
    assert exc.api_status == "UNAVAILABLE"
    assert "503" in str(exc)
    assert exc.user_message == ProviderError.user_message


def test_user_message_names_the_radius():
    assert NoCandidatesInRadius(2.5).user_message == "No places found within 2.5 miles."
