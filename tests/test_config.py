import pytest

from endpoint.config import (
    DEFAULT_IP,
    DEFAULT_TIME_LIMIT,
    MAX_IP_LEN,
    MAX_UNIX_PATH,
    ConnectionConfig,
    parse_connection_args,
)


def test_empty_arguments_give_defaults():
    config = parse_connection_args([])
    assert config == ConnectionConfig()
    assert config.time_limit == 60
    assert config.use_tcp is False


def test_port_option_selects_tcp_on_localhost():
    config = parse_connection_args(["-p", "8080"])
    assert config.use_tcp is True
    assert config.port == 8080
    assert config.ip == "127.0.0.1"
    assert config.unix_path == ""


def test_ip_option_resets_port():
    config = parse_connection_args(["-ip", "10.0.0.5"])
    assert config.use_tcp is True
    assert config.ip == "10.0.0.5"
    assert config.port == -1


def test_unix_option_clears_tcp_fields():
    config = parse_connection_args(["-p", "9000", "-u", "/tmp/endpoint.sock"])
    assert config.use_tcp is False
    assert config.unix_path == "/tmp/endpoint.sock"
    assert config.ip == ""
    assert config.port == -1


def test_time_limit_option():
    config = parse_connection_args(["-u", "sock", "-t", "5"])
    assert config.time_limit == 5
    assert config.unix_path == "sock"


def test_option_without_value_is_ignored():
    config = parse_connection_args(["-p"])
    assert config == ConnectionConfig()


def test_later_transport_option_wins():
    config = parse_connection_args(["-u", "sock", "-p", "7000"])
    assert config.use_tcp is True
    assert config.port == 7000
    assert config.ip == DEFAULT_IP
    assert config.unix_path == ""


@pytest.mark.parametrize("value", ["abc", "", "x12"])
def test_non_numeric_port_reads_as_zero(value):
    config = parse_connection_args(["-p", value])
    assert config.port == 0


def test_leading_digits_are_used():
    config = parse_connection_args(["-t", "15s"])
    assert config.time_limit == 15


def test_long_ip_is_truncated():
    config = parse_connection_args(["-ip", "1" * 40])
    assert len(config.ip) == MAX_IP_LEN - 1


def test_long_unix_path_is_truncated():
    config = parse_connection_args(["-u", "p" * 300])
    assert len(config.unix_path) == MAX_UNIX_PATH - 1


def test_unknown_words_are_skipped():
    config = parse_connection_args(["hello", "-t", "3", "world"])
    assert config.time_limit == 3
    assert config.use_tcp is False


def test_address_for_tcp_and_unix():
    tcp = parse_connection_args(["-p", "8080"])
    assert tcp.address == (DEFAULT_IP, 8080)
    unix = parse_connection_args(["-u", "/tmp/s"])
    assert unix.address == "/tmp/s"


def test_default_time_limit_constant_matches():
    assert ConnectionConfig().time_limit == DEFAULT_TIME_LIMIT