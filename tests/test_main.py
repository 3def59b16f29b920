import argparse
import signal

import pytest

from upnp_search.config.config_loader import ConfigLoader
from upnp_search.core.data_models import NO_DEVICES_FOUND, SortKey
from upnp_search.main import UPnPSearchApp, create_argument_parser, positive_int
from upnp_search.utils.error_handler import ErrorType, ServiceStartError
from upnp_search.utils.logger import LogLevel, get_log_level, set_log_level

from conftest import FakeDiscoveryService, make_device


@pytest.fixture(autouse=True)
def restore_log_level():
    level = get_log_level()
    yield
    set_log_level(level)


@pytest.fixture
def config_dir(tmp_path):
    (tmp_path / "search_config.yml").write_text(
        "search:\n  timeout: 2\n  table_gutter: 1\nlogging:\n  level: ERROR\n",
        encoding="utf-8",
    )
    return str(tmp_path)


def make_app(service, writer, waits=None):
    return UPnPSearchApp(
        service_factory=lambda config: service,
        writer=writer,
        sleep=(waits.append if waits is not None else lambda _: None),
    )


def test_parser_defaults_leave_values_to_configuration():
    args = create_argument_parser().parse_args([])
    assert args.timeout is None
    assert args.sort_by is None
    assert args.filter is None
    assert args.verbose is False
    assert args.debug is False


def test_parser_accepts_all_sort_keys_and_aliases():
    parser = create_argument_parser()
    for value in [key.value for key in SortKey] + ["ip", "udn"]:
        assert parser.parse_args(["--sort-by", value]).sort_by == value


def test_parser_rejects_unknown_sort_key():
    with pytest.raises(SystemExit):
        create_argument_parser().parse_args(["--sort-by", "colour"])


@pytest.mark.parametrize("value", ["0", "-1", "ten"])
def test_positive_int_rejects_invalid_values(value):
    with pytest.raises(argparse.ArgumentTypeError):
        positive_int(value)


def test_positive_int_accepts_positive_values():
    assert positive_int("15") == 15


def test_command_line_overrides_configuration(config_dir, writer):
    app = make_app(FakeDiscoveryService(), writer)
    args = create_argument_parser().parse_args(
        ["--config-dir", config_dir, "-t", "9", "-s", "ip", "-f", "Acme", "-v"])
    options = app.build_options(args, ConfigLoader(config_dir).load())
    assert options.timeout == 9
    assert options.sort_by is SortKey.ADDRESS
    assert options.filter == "Acme"
    assert options.verbose is True
    assert options.table_gutter == 1


def test_run_uses_configured_timeout_and_streams(config_dir, writer):
    service = FakeDiscoveryService()
    waits = []
    app = make_app(service, writer, waits)
    args = create_argument_parser().parse_args(["--config-dir", config_dir])

    assert app.run(args) == 0
    assert waits == [2]
    assert "on_device_discovered" in service.calls
    assert writer.lines[-1] == NO_DEVICES_FOUND
    assert get_log_level() is LogLevel.ERROR


def test_run_sorted_report(config_dir, writer):
    service = FakeDiscoveryService()
    service.known = [make_device(address="10.0.0.9"), make_device(address="10.0.0.10")]
    app = make_app(service, writer)
    args = create_argument_parser().parse_args(["--config-dir", config_dir, "--sort-by", "ip"])

    assert app.run(args) == 0
    assert [line.split()[0] for line in writer.lines[1:]] == ["10.0.0.9", "10.0.0.10"]


def test_debug_flag_overrides_configured_level(config_dir, writer):
    app = make_app(FakeDiscoveryService(), writer)
    app.run(create_argument_parser().parse_args(["--config-dir", config_dir, "--debug"]))
    assert get_log_level() is LogLevel.DEBUG


def test_start_failure_exits_with_error(config_dir, writer):
    service = FakeDiscoveryService(fail_start=ServiceStartError("no interface"))
    app = make_app(service, writer)
    args = create_argument_parser().parse_args(["--config-dir", config_dir])

    assert app.run(args) == 1
    assert service.calls == ["start"]
    assert sum(app.error_handler.error_statistics.values()) == 1


def test_first_signal_interrupts_and_second_exits(writer):
    app = make_app(FakeDiscoveryService(), writer)
    with pytest.raises(KeyboardInterrupt):
        app._signal_handler(signal.SIGTERM, None)
    with pytest.raises(SystemExit):
        app._signal_handler(signal.SIGTERM, None)


def test_version_option(capsys):
    with pytest.raises(SystemExit) as exc_info:
        create_argument_parser().parse_args(["--version"])
    assert exc_info.value.code == 0
    assert "UPnP Search" in capsys.readouterr().out


def test_missing_config_directory_exits_with_error(tmp_path, writer):
    service = FakeDiscoveryService()
    app = make_app(service, writer)
    args = create_argument_parser().parse_args(["--config-dir", str(tmp_path / "missing")])

    assert app.run(args) == 1
    assert service.calls == []
    assert app.error_handler.error_statistics[ErrorType.CONFIGURATION_ERROR] == 1
    assert writer.text == ""


def test_unparsable_config_exits_with_error(tmp_path, writer):
    (tmp_path / "search_config.yml").write_text("search: [unclosed\n", encoding="utf-8")
    app = make_app(FakeDiscoveryService(), writer)
    assert app.run(create_argument_parser().parse_args(["--config-dir", str(tmp_path)])) == 1
