import pytest

from nominations.run_server import _parse_bind, build_parser, config_from_args


@pytest.mark.parametrize(
    "bind,expected",
    [
        ("ws://localhost:9000", ("localhost", 9000)),
        ("ws://10.0.0.5", ("10.0.0.5", 8080)),
        ("0.0.0.0:7000", ("0.0.0.0", 7000)),
        (":7001", ("0.0.0.0", 7001)),
        ("7002", ("0.0.0.0", 7002)),
    ],
)
def test_parse_bind(bind, expected):
    assert _parse_bind(bind) == expected


def test_config_from_args():
    args = build_parser().parse_args(
        ["--bind", "127.0.0.1:9001", "--nominations", "2", "--votes", "4", "--ping-interval", "off"]
    )
    config = config_from_args(args)
    assert (config.host, config.port) == ("127.0.0.1", 9001)
    assert config.session.starting_nominations == 2
    assert config.session.starting_votes == 4
    assert config.ping_interval is None


def test_env_defaults(monkeypatch):
    monkeypatch.setenv("STARTING_VOTES", "7")
    monkeypatch.setenv("BIND", "ws://127.0.0.1:9100")
    config = config_from_args(build_parser().parse_args([]))
    assert config.session.starting_votes == 7
    assert config.port == 9100


def test_invalid_budget_is_rejected():
    args = build_parser().parse_args(["--votes", "0"])
    with pytest.raises(ValueError):
        config_from_args(args)
