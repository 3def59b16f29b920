import threading

from upnp_search.core.data_models import NO_DEVICES_FOUND, SearchOptions, SortKey
from upnp_search.core.result_collector import (
    SortedCollector, StreamingCollector, create_collector,
)

from conftest import make_record


def test_create_collector_selects_strategy(writer):
    assert isinstance(create_collector(SearchOptions(sort_by=SortKey.NONE), writer), StreamingCollector)
    assert isinstance(create_collector(SearchOptions(sort_by="model"), writer), SortedCollector)
    assert isinstance(create_collector(SearchOptions(sort_by="bogus"), writer), SortedCollector)


def test_add_keeps_first_record_per_address(writer):
    collector = create_collector(SearchOptions(sort_by=SortKey.ADDRESS), writer)
    first = make_record(address="10.0.0.1", model="First")
    assert collector.add(first) is True
    assert collector.add(make_record(address="10.0.0.1", model="Second")) is False
    assert collector.add(make_record(address="10.0.0.2")) is True
    assert collector.records[0] is first
    assert [r.address for r in collector.records] == ["10.0.0.1", "10.0.0.2"]
    assert len(collector) == 2


def test_streaming_collector_emits_header_then_rows(writer):
    collector = create_collector(SearchOptions(), writer)
    collector.begin()
    collector.add(make_record(address="10.0.0.1"))
    collector.add(make_record(address="10.0.0.1", model="Duplicate"))
    collector.add(make_record(address="10.0.0.2"))

    lines = writer.lines
    assert len(lines) == 3
    assert lines[0].startswith("IP address")
    assert lines[1].startswith("10.0.0.1")
    assert lines[2].startswith("10.0.0.2")
    assert "Duplicate" not in writer.text


def test_streaming_collector_reports_empty_result(writer):
    collector = create_collector(SearchOptions(), writer)
    collector.begin()
    body = collector.finish()
    assert body == NO_DEVICES_FOUND
    assert writer.lines[-1] == NO_DEVICES_FOUND


def test_streaming_collector_has_no_body_after_rows(writer):
    collector = create_collector(SearchOptions(), writer)
    collector.begin()
    collector.add(make_record())
    assert collector.finish() == ""
    assert len(writer.lines) == 2


def test_sorted_collector_defers_all_output(writer):
    collector = create_collector(SearchOptions(sort_by=SortKey.ADDRESS), writer)
    collector.begin()
    collector.add(make_record(address="10.0.0.10"))
    collector.add(make_record(address="10.0.0.2"))
    assert writer.text == ""

    collector.finish()
    lines = writer.lines
    assert lines[0].split()[:2] == ["IP", "address"]
    assert [line.split()[0] for line in lines[1:]] == ["10.0.0.2", "10.0.0.10"]


def test_sorted_collector_empty_result_has_header_and_marker(writer):
    collector = create_collector(SearchOptions(sort_by=SortKey.MODEL, verbose=True), writer)
    collector.begin()
    body = collector.finish()
    lines = body.splitlines()
    assert lines[0].split() == ["IP", "address", "Model", "Manufacturer", "SerialNumber", "UDN"]
    assert lines[1] == NO_DEVICES_FOUND
    assert body.endswith(NO_DEVICES_FOUND)


def test_sorted_collector_uses_gutter(writer):
    collector = create_collector(SearchOptions(sort_by=SortKey.ADDRESS, table_gutter=1), writer)
    collector.add(make_record(address="10.0.0.1", model="M", serial_number="S"))
    body = collector.render_body()
    assert body.splitlines()[1] == "10.0.0.1".ljust(18) + "M".ljust(26) + "S".ljust(26)


def test_verbose_and_compact_row_field_counts(writer):
    record = make_record(address="10.0.0.1", model="Model", manufacturer="Maker",
                         serial_number="Serial", identifier="uuid:1")
    compact = create_collector(SearchOptions(sort_by=SortKey.ADDRESS), writer)
    verbose = create_collector(SearchOptions(sort_by=SortKey.ADDRESS, verbose=True), writer)
    compact.add(record)
    verbose.add(record)
    assert compact.render_body().splitlines()[1].split() == ["10.0.0.1", "Model", "Serial"]
    assert verbose.render_body().splitlines()[1].split() == [
        "10.0.0.1", "Model", "Maker", "Serial", "uuid:1"]


def test_streaming_collector_is_safe_under_concurrent_adds(writer):
    collector = create_collector(SearchOptions(), writer)
    barrier = threading.Barrier(8)

    def worker(offset):
        barrier.wait()
        for index in range(50):
            collector.add(make_record(address=f"10.0.{index}.{offset % 2}"))

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(collector) == 100
    assert len(writer.lines) == 100
    assert len({record.address for record in collector.records}) == 100


def test_closed_streaming_collector_drops_late_records(writer):
    collector = create_collector(SearchOptions(), writer)
    collector.begin()
    collector.add(make_record(address="10.0.0.1"))
    collector.close()
    body = collector.finish()

    assert collector.closed
    assert collector.add(make_record(address="10.0.0.2")) is False
    assert body == ""
    assert len(collector) == 1
    assert "10.0.0.2" not in writer.text


def test_closed_sorted_collector_keeps_its_table(writer):
    collector = create_collector(SearchOptions(sort_by=SortKey.ADDRESS), writer)
    collector.close()
    assert collector.add(make_record(address="10.0.0.1")) is False
    assert collector.finish().splitlines()[-1] == NO_DEVICES_FOUND
