from schemaview.schema import describe, list_tables, read_sqlite_schema
from schemaview.exceptions import SchemaViewError

__all__ = ["describe", "list_tables", "read_sqlite_schema", "SchemaViewError"]
