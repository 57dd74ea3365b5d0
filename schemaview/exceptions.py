class SchemaViewError(Exception):
    pass


class DecodeError(SchemaViewError):
    pass


class TruncatedError(DecodeError):
    """
    A byte source ran out before the value being decoded was complete.
    """


class RowDecodeError(DecodeError):
    """
    A single cell could not be turned into a schema row. Scanners skip the cell.
    """

    def __init__(self, cell_pointer: int, reason: str):
        super().__init__(f"cell at offset {cell_pointer}: {reason}")
        self.cell_pointer = cell_pointer
        self.reason = reason


class DatabaseFileError(SchemaViewError, OSError):
    """
    One of the fixed regions of page 1 could not be read in full.
    """


class UsageError(SchemaViewError):
    pass
