from __future__ import annotations
import io
import logging
from enum import Enum
from dataclasses import dataclass

from schemaview.consts import (
    CELL_COUNT_OFFSET,
    CELL_POINTER_SIZE,
    PAGE1_HEADER_READ_SIZE,
    PAGE_SIZE_OFFSET,
    PAGE_TYPE_OFFSET,
    SQLITE_HEADER_MAGIC,
)
from schemaview.exceptions import DatabaseFileError, TruncatedError
from schemaview.reading import read_varint

from typing import BinaryIO, List, Optional, Tuple

logger = logging.getLogger(__name__)


class PageType(Enum):
    INTERIOR_INDEX = 0x02
    INTERIOR_TABLE = 0x05
    LEAF_INDEX = 0x0A
    LEAF_TABLE = 0x0D


@dataclass(frozen=True)
class FileHeader:
    """
    The fields we need out of the 100 byte database header.
    https://www.sqlite.org/fileformat.html#the_database_header
    """

    magic: bytes
    page_size: int  # a value of 1 stands for 65536, reported as is

    @staticmethod
    def from_bytes(header_bytes: bytes) -> FileHeader:
        return FileHeader(
            magic=bytes(header_bytes[: len(SQLITE_HEADER_MAGIC)]),
            page_size=int.from_bytes(
                header_bytes[PAGE_SIZE_OFFSET : PAGE_SIZE_OFFSET + 2], "big"
            ),
        )

    @property
    def has_valid_magic(self) -> bool:
        return self.magic == SQLITE_HEADER_MAGIC


class Page:
    """
    Page 1 of the database: the file header, the b-tree page header that directly
    follows it, and the cell pointer array of the schema table.

    Only the leaf layout is understood, the schema table is assumed to fit in page 1.
    """

    file_header: FileHeader
    page_type: Optional[PageType]
    cell_count: int
    cell_pointer_array: List[int]

    @staticmethod
    def from_file(database_file: BinaryIO) -> Page:
        instance = Page()
        header_bytes = _read_page1_prefix(database_file)

        instance.file_header = FileHeader.from_bytes(header_bytes)
        if not instance.file_header.has_valid_magic:
            logger.warning(
                "Unexpected header string %r, reading the file anyway",
                instance.file_header.magic,
            )

        page_type_int = header_bytes[PAGE_TYPE_OFFSET]
        try:
            instance.page_type = PageType(page_type_int)
        except ValueError:
            instance.page_type = None
        if instance.page_type != PageType.LEAF_TABLE:
            logger.warning(
                "Page 1 has type %#04x instead of a table leaf, the schema may be incomplete",
                page_type_int,
            )

        instance.cell_count = _read_cell_count(header_bytes)
        # the cell pointer array starts right after the leaf page header
        instance.cell_pointer_array = Page.__read_cell_pointers_from_file(
            database_file, instance.cell_count
        )

        return instance

    #  The cell pointer array consists of K 2-byte integer offsets to the cell contents.
    #  On page 1 those offsets are relative to the start of the file.
    @staticmethod
    def __read_cell_pointers_from_file(
        database_file: BinaryIO, cell_count: int
    ) -> List[int]:
        pointer_bytes = database_file.read(cell_count * CELL_POINTER_SIZE)
        if len(pointer_bytes) < cell_count * CELL_POINTER_SIZE:
            raise DatabaseFileError(
                f"Cell pointer array of {cell_count} cells is cut short by the end of the file"
            )

        return [
            int.from_bytes(pointer_bytes[i : i + CELL_POINTER_SIZE], "big")
            for i in range(0, len(pointer_bytes), CELL_POINTER_SIZE)
        ]


def read_page1_header(database_file: BinaryIO) -> Tuple[int, int]:
    """
    Returns the page size and the number of cells stored on page 1.
    """
    header_bytes = _read_page1_prefix(database_file)
    return FileHeader.from_bytes(header_bytes).page_size, _read_cell_count(header_bytes)


def read_cell(database_file: BinaryIO, cell_pointer: int) -> Tuple[int, bytes]:
    """
    Reads the table leaf cell found at ``cell_pointer`` and returns its row id and payload.
    https://www.sqlite.org/fileformat.html#b_tree_pages
    """
    file_size = database_file.seek(0, io.SEEK_END)
    database_file.seek(cell_pointer)

    payload_size, _ = read_varint(database_file)
    row_id, _ = read_varint(database_file)

    # guards against allocating a bogus payload size before reading it
    if payload_size > file_size - database_file.tell():
        raise TruncatedError(
            f"payload of {payload_size} bytes runs past the end of the file"
        )

    return row_id, database_file.read(payload_size)


def _read_page1_prefix(database_file: BinaryIO) -> bytes:
    database_file.seek(0)
    header_bytes = database_file.read(PAGE1_HEADER_READ_SIZE)
    if len(header_bytes) < PAGE1_HEADER_READ_SIZE:
        raise DatabaseFileError(
            f"File holds {len(header_bytes)} bytes, at least {PAGE1_HEADER_READ_SIZE} are needed"
        )
    return header_bytes


def _read_cell_count(header_bytes: bytes) -> int:
    return int.from_bytes(header_bytes[CELL_COUNT_OFFSET : CELL_COUNT_OFFSET + 2], "big")
