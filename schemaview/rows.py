# record format
# https://www.sqlite.org/fileformat.html#record_format
# A record contains a header and a body, in that order
from __future__ import annotations
from dataclasses import dataclass

from schemaview.reading import ColumnValue

from typing import List, Optional


# https://www.sqlite.org/fileformat.html#storage_of_the_sql_database_schema
@dataclass
class SchemaRow:
    """
    One row of the schema table. A record that was cut short leaves the trailing
    columns as None.
    """

    table_type: Optional[ColumnValue] = None
    name: Optional[ColumnValue] = None
    table_name: Optional[ColumnValue] = None
    rootpage: Optional[ColumnValue] = None
    sql: Optional[ColumnValue] = None

    @staticmethod
    def from_record(record: List[ColumnValue]) -> SchemaRow:
        return SchemaRow(*record[:5])

    def has_type(self, table_type: str) -> bool:
        # only a TEXT column can name a type, a BLOB holding the same bytes does not count
        return isinstance(self.table_type, str) and self.table_type == table_type
