import pytest

from upnp_search.core.data_models import (
    SERIAL_PLACEHOLDER, SearchOptions, SortKey, normalize_serial_number,
)
from upnp_search.core.device_intake import DeviceFilter, DeviceIntake, extract_record, match_text
from upnp_search.core.result_collector import create_collector

from conftest import make_device


@pytest.fixture
def collector(writer):
    return create_collector(SearchOptions(sort_by=SortKey.ADDRESS), writer)


@pytest.mark.parametrize("serial, expected", [
    (None, SERIAL_PLACEHOLDER),
    ("", SERIAL_PLACEHOLDER),
    ("null", SERIAL_PLACEHOLDER),
    ("NULL", "NULL"),
    ("12345", "12345"),
])
def test_serial_number_normalization(serial, expected):
    assert normalize_serial_number(serial) == expected
    assert extract_record(make_device(serial_number=serial)).serial_number == expected


def test_extract_record_copies_reportable_fields():
    record = extract_record(make_device(address="10.1.2.3", udn="uuid:x", model_name="Box",
                                        manufacturer="Maker"))
    assert record.address == "10.1.2.3"
    assert record.model == "Box"
    assert record.manufacturer == "Maker"
    assert record.identifier == "uuid:x"


def test_match_text_joins_fields_with_newlines():
    device = make_device(address="10.1.2.3", udn="uuid:x", model_name="Box",
                         manufacturer="Maker", serial_number="S1", display_name="Kitchen")
    text = match_text(extract_record(device), device.display_name)
    assert text == "10.1.2.3\nBox\nMaker\nuuid:x\nS1\nKitchen"


def test_wildcard_filter_accepts_everything():
    assert DeviceFilter("*").matches("")
    assert DeviceFilter("*").matches("anything")


def test_filter_is_literal_and_case_sensitive():
    device_filter = DeviceFilter("Box.")
    assert device_filter.matches("a Box. here")
    assert not device_filter.matches("a Boxy here")
    assert not DeviceFilter("box").matches("Box")


def test_filter_does_not_match_across_field_boundaries():
    text = "10.0.0.1\nBox\nMaker"
    assert not DeviceFilter("BoxMaker").matches(text)
    assert DeviceFilter("Box\nMaker").matches(text)


def test_intake_matches_display_name(collector):
    intake = DeviceIntake(collector, DeviceFilter("Kitchen"))
    assert intake.handle(make_device(address="10.0.0.1", display_name="Kitchen speaker"))
    assert not intake.handle(make_device(address="10.0.0.2", display_name="Hall"))
    assert [r.address for r in collector.records] == ["10.0.0.1"]


def test_intake_skips_embedded_devices(collector):
    intake = DeviceIntake(collector, DeviceFilter("*"))
    assert not intake.handle(make_device(address="10.0.0.1", is_root=False))
    assert len(collector) == 0


def test_rejected_device_does_not_block_later_arrival(collector):
    intake = DeviceIntake(collector, DeviceFilter("Wanted"))
    assert not intake.handle(make_device(address="10.0.0.1", model_name="Other"))
    assert intake.handle(make_device(address="10.0.0.1", model_name="Wanted"))
    assert collector.records[0].model == "Wanted"


def test_duplicate_address_is_dropped(collector):
    intake = DeviceIntake(collector, DeviceFilter("*"))
    assert intake.handle(make_device(address="10.0.0.1", udn="uuid:a"))
    assert not intake.handle(make_device(address="10.0.0.1", udn="uuid:b"))
    assert [r.identifier for r in collector.records] == ["uuid:a"]
