import sqlite3
import struct

import pytest

from schemaview.consts import (
    CELL_COUNT_OFFSET,
    PAGE1_HEADER_READ_SIZE,
    PAGE_SIZE_OFFSET,
    PAGE_TYPE_OFFSET,
    SQLITE_HEADER_MAGIC,
)
from schemaview.pages import PageType


def encode_varint(value):
    if value > 0x00FF_FFFF_FFFF_FFFF:
        # needs all 9 bytes, the last one keeps the lowest 8 bits
        out = bytearray(9)
        out[8] = value & 0xFF
        value >>= 8
        for i in range(7, -1, -1):
            out[i] = (value & 0x7F) | 0x80
            value >>= 7
        return bytes(out)

    groups = [value & 0x7F]
    value >>= 7
    while value:
        groups.append((value & 0x7F) | 0x80)
        value >>= 7
    return bytes(reversed(groups))


def encode_column(value):
    """Returns the serial type and the body bytes of a single column."""
    if value is None:
        return 0, b""
    if isinstance(value, float):
        return 7, struct.pack(">d", value)
    if isinstance(value, int):
        for serial_type, size in ((1, 1), (2, 2), (3, 3), (4, 4), (5, 6), (6, 8)):
            try:
                return serial_type, value.to_bytes(size, "big", signed=True)
            except OverflowError:
                continue
        raise OverflowError(value)
    if isinstance(value, str):
        value = value.encode("utf-8")
        return 13 + 2 * len(value), value
    return 12 + 2 * len(value), bytes(value)


def build_record(values):
    columns = [encode_column(value) for value in values]
    serial_types = b"".join(encode_varint(serial_type) for serial_type, _ in columns)

    header_size = len(serial_types) + 1
    while len(encode_varint(header_size)) + len(serial_types) != header_size:
        header_size = len(encode_varint(header_size)) + len(serial_types)

    return (
        encode_varint(header_size)
        + serial_types
        + b"".join(body for _, body in columns)
    )


def schema_record(table_type, name, sql=None, rootpage=2, table_name=None):
    return build_record(
        [table_type, name, name if table_name is None else table_name, rootpage, sql]
    )


def build_cell(payload, row_id=1):
    return encode_varint(len(payload)) + encode_varint(row_id) + payload


def build_database(
    cells,
    page_size=4096,
    page_type=PageType.LEAF_TABLE.value,
    magic=SQLITE_HEADER_MAGIC,
    cell_count=None,
):
    """
    Lays out page 1 by hand: header, leaf page header, cell pointer array and the
    cells back to back right after it.
    """
    header = bytearray(PAGE1_HEADER_READ_SIZE)
    header[: len(magic)] = magic
    header[PAGE_SIZE_OFFSET : PAGE_SIZE_OFFSET + 2] = page_size.to_bytes(2, "big")
    header[PAGE_TYPE_OFFSET] = page_type
    count = len(cells) if cell_count is None else cell_count
    header[CELL_COUNT_OFFSET : CELL_COUNT_OFFSET + 2] = count.to_bytes(2, "big")

    cell_area_start = len(header) + 2 * len(cells)
    pointers = bytearray()
    body = bytearray()
    for cell in cells:
        pointers += (cell_area_start + len(body)).to_bytes(2, "big")
        body += cell

    return bytes(header) + bytes(pointers) + bytes(body)


@pytest.fixture
def write_db(tmp_path):
    def _write(data, name="test.db"):
        path = tmp_path / name
        path.write_bytes(data)
        return path

    return _write


@pytest.fixture
def users_db(write_db):
    return write_db(
        build_database(
            [
                build_cell(
                    schema_record(
                        "table", "users", "CREATE TABLE users (id integer primary key, name text)"
                    ),
                    row_id=1,
                ),
                build_cell(
                    schema_record(
                        "index",
                        "idx_users_name",
                        "CREATE INDEX idx_users_name ON users (name)",
                        rootpage=3,
                        table_name="users",
                    ),
                    row_id=2,
                ),
            ]
        )
    )


@pytest.fixture
def sqlite_db(tmp_path):
    path = tmp_path / "real.db"
    connection = sqlite3.connect(path)
    try:
        connection.execute("CREATE TABLE apples (id integer primary key, name text, color text)")
        connection.execute("CREATE INDEX idx_apples_color ON apples (color)")
        connection.execute("CREATE TABLE oranges (id integer primary key, description text)")
        connection.commit()
    finally:
        connection.close()
    return path
