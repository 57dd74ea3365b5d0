import logging
import struct

from schemaview.consts import (
    CONTINUATION_BIT_MASK,
    LAST_SEVEN_BITS_MASK,
    VARINT_MAX_BYTES,
)
from schemaview.exceptions import DecodeError, TruncatedError
from typing import BinaryIO, List, Optional, Tuple, Union

logger = logging.getLogger(__name__)

ColumnValue = Union[None, int, float, str, bytes]


class ByteCursor:
    """
    Read-only cursor over an in-memory buffer, bounded to [start, end).

    It quacks like a binary stream (``read``) so the same varint routine decodes
    bytes straight off the database file or out of an already loaded payload.
    ``take`` is the strict variant: it never returns fewer bytes than asked for.
    """

    def __init__(self, buffer: bytes, start: int = 0, end: Optional[int] = None):
        self._buffer = buffer
        self._end = len(buffer) if end is None else min(end, len(buffer))
        self.position = min(start, self._end)

    @property
    def remaining(self) -> int:
        return self._end - self.position

    def read(self, size: int = -1) -> bytes:
        if size < 0 or size > self.remaining:
            size = self.remaining
        chunk = self._buffer[self.position : self.position + size]
        self.position += size
        return chunk

    def take(self, size: int) -> bytes:
        if size > self.remaining:
            raise TruncatedError(
                f"wanted {size} bytes at offset {self.position}, only {self.remaining} left"
            )
        return self.read(size)

    def read_varint(self) -> int:
        value, _ = read_varint(self)
        return value


def read_varint(stream: BinaryIO) -> Tuple[int, int]:
    """
    Decodes a varint from anything exposing ``read(1)`` and returns it along with
    the number of bytes it used.

    The first 8 bytes carry 7 bits each while their high bit is set. A 9th byte,
    if reached, contributes all of its 8 bits and always ends the varint.
    https://www.sqlite.org/fileformat.html#varint
    """
    value = 0
    for byte_count in range(1, VARINT_MAX_BYTES):
        byte = _read_byte(stream)
        value = (value << 7) | (byte & LAST_SEVEN_BITS_MASK)
        if (byte & CONTINUATION_BIT_MASK) == 0:
            return value, byte_count

    return (value << 8) | _read_byte(stream), VARINT_MAX_BYTES


def _read_byte(stream: BinaryIO) -> int:
    chunk = stream.read(1)
    if not chunk:
        raise TruncatedError("byte source exhausted in the middle of a varint")
    return chunk[0]


# serial type -> number of bytes in the data area, for the fixed size types
# 10 and 11 are reserved for internal use and never hold data
_FIXED_SERIAL_TYPE_LENGTHS = {0: 0, 1: 1, 2: 2, 3: 3, 4: 4, 5: 6, 6: 8, 7: 8, 8: 0, 9: 0, 10: 0, 11: 0}


def is_text_serial_type(serial_type: int) -> bool:
    return serial_type >= 13 and serial_type % 2 == 1


def is_blob_serial_type(serial_type: int) -> bool:
    return serial_type >= 12 and serial_type % 2 == 0


def serial_type_length(serial_type: int) -> int:
    # https://www.sqlite.org/fileformat.html#record_format
    if serial_type in _FIXED_SERIAL_TYPE_LENGTHS:
        return _FIXED_SERIAL_TYPE_LENGTHS[serial_type]
    elif is_blob_serial_type(serial_type):
        return (serial_type - 12) // 2
    elif is_text_serial_type(serial_type):
        return (serial_type - 13) // 2

    raise DecodeError(f"Unknown serial_type {serial_type}")


def read_column_value(column_bytes: bytes, serial_type: int) -> ColumnValue:
    if serial_type in (0, 10, 11):
        return None
    elif 1 <= serial_type <= 6:
        return int.from_bytes(column_bytes, "big", signed=True)
    elif serial_type == 7:
        return struct.unpack(">d", column_bytes)[0]
    elif serial_type == 8:
        return 0
    elif serial_type == 9:
        return 1
    elif is_text_serial_type(serial_type):
        return column_bytes.decode("utf-8", errors="replace")

    return bytes(column_bytes)


def read_serial_types(
    payload: bytes, header_size: int, start: int, expected_columns: Optional[int]
) -> List[int]:
    """
    Reads serial types from the record header, which spans payload[start:header_size].

    Stops once ``expected_columns`` were read or the header area is used up. A varint
    cut short by the end of the header area is dropped rather than counted as a column.
    """
    header = ByteCursor(payload, start, header_size)

    serial_types = []
    while header.remaining > 0:
        if expected_columns is not None and len(serial_types) >= expected_columns:
            break
        try:
            serial_types.append(header.read_varint())
        except TruncatedError:
            logger.debug(
                "Record header ends in the middle of a serial type at offset %d",
                header.position,
            )
            break

    return serial_types


def read_table_record(
    payload: bytes, expected_columns: Optional[int] = None
) -> List[ColumnValue]:
    """
    Decodes a record (https://www.sqlite.org/fileformat.html#record_format) into its
    column values.

    Raises ``DecodeError`` when the record can't be decoded at all, that is when its
    header size is missing or points past the payload. Any other overrun only cuts the
    row short: the columns decoded so far are returned.
    """
    cursor = ByteCursor(payload)
    header_size, num_header_bytes = read_varint(cursor)
    if header_size > len(payload):
        raise DecodeError(
            f"Record header size {header_size} exceeds payload of {len(payload)} bytes"
        )

    serial_types = read_serial_types(
        payload, header_size, num_header_bytes, expected_columns
    )

    # the data area starts right where the header (including its own size varint) ends
    body = ByteCursor(payload, header_size)
    record_columns = []
    for serial_type in serial_types:
        try:
            column_bytes = body.take(serial_type_length(serial_type))
        except DecodeError as e:
            logger.debug("Stopping record after %d columns: %s", len(record_columns), e)
            break
        record_columns.append(read_column_value(column_bytes, serial_type))

    return record_columns
