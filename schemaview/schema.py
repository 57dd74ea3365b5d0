import logging

import sqlparse

from schemaview.consts import SCHEMA_COLUMN_COUNT, SCHEMA_TABLE_TYPE
from schemaview.exceptions import DecodeError, RowDecodeError
from schemaview.pages import Page, read_cell, read_page1_header
from schemaview.reading import read_table_record
from schemaview.rows import SchemaRow

from typing import BinaryIO, List, Tuple

logger = logging.getLogger(__name__)


def describe(database_file: BinaryIO) -> Tuple[int, int]:
    """
    Returns the page size and the cell count of page 1.

    The cell count is what gets reported as the "number of tables", even though it
    also counts indexes, views and triggers and only covers a schema fitting in page 1.
    """
    return read_page1_header(database_file)


def read_schema_row(database_file: BinaryIO, cell_pointer: int) -> SchemaRow:
    try:
        _row_id, payload = read_cell(database_file, cell_pointer)
        record = read_table_record(payload, SCHEMA_COLUMN_COUNT)
    except (DecodeError, OSError) as e:
        raise RowDecodeError(cell_pointer, str(e)) from e

    return SchemaRow.from_record(record)


def read_sqlite_schema(database_file: BinaryIO) -> List[SchemaRow]:
    """
    Decodes every schema row stored on page 1, in cell pointer array order.
    Cells that can't be decoded are left out.
    """
    first_page = Page.from_file(database_file)

    schema_rows = []
    for cell_pointer in first_page.cell_pointer_array:
        try:
            schema_rows.append(read_schema_row(database_file, cell_pointer))
        except RowDecodeError as e:
            logger.debug("Skipping schema row: %s", e)

    return schema_rows


def list_tables(database_file: BinaryIO) -> List[str]:
    return [
        schema.table_name
        for schema in read_sqlite_schema(database_file)
        if schema.has_type(SCHEMA_TABLE_TYPE) and isinstance(schema.table_name, str)
    ]


def table_schemas(database_file: BinaryIO) -> List[str]:
    """
    Returns the CREATE statement of every table, reindented for display.
    """
    return [
        sqlparse.format(schema.sql, reindent=True)
        for schema in read_sqlite_schema(database_file)
        if schema.has_type(SCHEMA_TABLE_TYPE)
        and isinstance(schema.table_name, str)
        and isinstance(schema.sql, str)
    ]
