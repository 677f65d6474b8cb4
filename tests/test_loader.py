import asyncio
import json

import httpx
import pytest

from profile_insights import MalformedInput, SourceReadError, load_pair, load_profile
from profile_insights.loader import aread_profile_text, is_url, read_profile_text


def profile_transport(profile, status_code=200):
    def handler(request):
        if request.url.path == "/missing":
            return httpx.Response(404)
        return httpx.Response(status_code, text=json.dumps(profile))
    return httpx.MockTransport(handler)


def test_is_url():
    assert is_url("https://example.com/run.cpuprofile")
    assert is_url("http://localhost:9000/p")
    assert not is_url("/tmp/run.cpuprofile")
    assert not is_url("-")


def test_load_profile_from_file(write_profile, three_node_profile):
    parsed = load_profile(write_profile(three_node_profile))
    assert parsed.stats.total_time == 300


def test_missing_file_is_a_read_error(tmp_path):
    with pytest.raises(SourceReadError) as excinfo:
        read_profile_text(str(tmp_path / "nope.cpuprofile"))
    assert "nope.cpuprofile" in str(excinfo.value)


def test_malformed_file_is_a_parse_error(tmp_path):
    path = tmp_path / "broken.cpuprofile"
    path.write_text('{"startTime": 0}', encoding="utf-8")
    with pytest.raises(MalformedInput):
        load_profile(str(path))


def test_read_from_url(three_node_profile):
    with httpx.Client(transport=profile_transport(three_node_profile)) as client:
        text = read_profile_text("https://profiles.example.com/run.cpuprofile", client=client)
    assert json.loads(text) == three_node_profile


def test_http_error_is_a_read_error(three_node_profile):
    with httpx.Client(transport=profile_transport(three_node_profile)) as client:
        with pytest.raises(SourceReadError, match="HTTP 404"):
            read_profile_text("https://profiles.example.com/missing", client=client)


def test_transport_failure_is_a_read_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(SourceReadError, match="connection refused"):
            read_profile_text("https://profiles.example.com/run", client=client)


def test_async_read_from_url(three_node_profile):
    async def fetch():
        async with httpx.AsyncClient(transport=profile_transport(three_node_profile)) as client:
            return await aread_profile_text("https://profiles.example.com/run", client=client)

    assert json.loads(asyncio.run(fetch())) == three_node_profile


def test_async_read_from_file(write_profile, three_node_profile):
    text = asyncio.run(aread_profile_text(write_profile(three_node_profile)))
    assert json.loads(text) == three_node_profile


def test_load_pair(write_profile, three_node_profile, nested_profile):
    base, comp = load_pair(write_profile(three_node_profile, "a.cpuprofile"),
                           write_profile(nested_profile, "b.cpuprofile"))
    assert base.stats.total_time == 300
    assert comp.stats.total_time == 900


def test_load_pair_propagates_errors(write_profile, three_node_profile, tmp_path):
    with pytest.raises(SourceReadError):
        load_pair(write_profile(three_node_profile), str(tmp_path / "missing.cpuprofile"))
