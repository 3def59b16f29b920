"""
Sort policy for batch search reports.

Addresses are compared structurally, segment by segment as unsigned
integers, so 10.0.0.2 sorts before 10.0.0.10. All other columns are
compared by their plain string value. Sorting is stable, so records that
compare equal keep their arrival order.
"""

from typing import Any, Callable, Dict, List, Sequence, Tuple, Union

from .data_models import DeviceRecord, SortKey
from ..utils.network_utils import address_segments


def address_sort_key(address: str) -> Tuple[int, Any]:
    """
    Build the ordering key of an address.

    Well-formed addresses order by their numeric segments. An address with
    a segment that is not an unsigned integer sorts after every well-formed
    one, and such addresses order by their plain text among themselves.

    Args:
        address: Dotted address

    Returns:
        A tuple usable as a sort key
    """
    segments = address_segments(address)
    if segments is None:
        return (1, address)
    return (0, segments)


def compare_addresses(first: str, second: str) -> int:
    """
    Compare two dotted addresses segment by segment.

    Args:
        first: Dotted address
        second: Dotted address

    Returns:
        -1, 0 or 1 as first sorts before, equal to or after second
    """
    first_key = address_sort_key(first)
    second_key = address_sort_key(second)
    if first_key < second_key:
        return -1
    if first_key > second_key:
        return 1
    return 0


SORT_KEY_FUNCTIONS: Dict[SortKey, Callable[[DeviceRecord], Any]] = {
    SortKey.ADDRESS: lambda record: address_sort_key(record.address),
    SortKey.MODEL: lambda record: record.model,
    SortKey.SERIAL_NUMBER: lambda record: record.serial_number,
    SortKey.MANUFACTURER: lambda record: record.manufacturer,
    SortKey.IDENTIFIER: lambda record: record.identifier,
}


class SortPolicy:
    """Orders device records by one report column."""

    def __init__(self, sort_by: Union[SortKey, str]):
        """
        Initialize the policy.

        Args:
            sort_by: Sort key or its name; an unknown name or SortKey.NONE
                     leaves records in arrival order
        """
        if isinstance(sort_by, str):
            sort_by = SortKey.parse(sort_by) or sort_by
        self.sort_by = sort_by
        self._key = SORT_KEY_FUNCTIONS.get(sort_by)

    @property
    def orders_records(self) -> bool:
        return self._key is not None

    def sort(self, records: Sequence[DeviceRecord]) -> List[DeviceRecord]:
        """
        Return the records in report order.

        Args:
            records: Records in arrival order

        Returns:
            A new, stably sorted list
        """
        if self._key is None:
            return list(records)
        return sorted(records, key=self._key)
