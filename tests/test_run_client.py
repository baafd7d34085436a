import pytest

from nominations.run_client import _parse_server


@pytest.mark.parametrize(
    "server, port, expected",
    [
        ("ws://example.org:9000", None, ("example.org", 9000)),
        ("ws://example.org", 7000, ("example.org", 7000)),
        ("10.0.0.5:9000", None, ("10.0.0.5", 9000)),
        ("10.0.0.5:9000", 1234, ("10.0.0.5", 9000)),
        (":9001", None, ("127.0.0.1", 9001)),
        ("example.org", 7000, ("example.org", 7000)),
    ],
)
def test_parse_server(server, port, expected):
    assert _parse_server(server, port) == expected


def test_parse_server_falls_back_to_env(monkeypatch):
    monkeypatch.setenv("CLIENT_HOST", "10.1.1.1")
    monkeypatch.setenv("CLIENT_PORT", "9100")
    assert _parse_server(None, None) == ("10.1.1.1", 9100)
    assert _parse_server(None, 9200) == ("10.1.1.1", 9200)
