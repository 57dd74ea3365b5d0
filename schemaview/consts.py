# https://www.sqlite.org/fileformat.html#the_database_header
DB_FILE_HEADER_SIZE = 100
LEAF_PAGE_HEADER_SIZE = 8
# page 1 is the database header followed by the (leaf) page header of the schema table
PAGE1_HEADER_READ_SIZE = DB_FILE_HEADER_SIZE + LEAF_PAGE_HEADER_SIZE

SQLITE_HEADER_MAGIC = b"SQLite format 3\x00"
PAGE_SIZE_OFFSET = 16
PAGE_TYPE_OFFSET = DB_FILE_HEADER_SIZE
CELL_COUNT_OFFSET = DB_FILE_HEADER_SIZE + 3

CELL_POINTER_SIZE = 2

# https://www.sqlite.org/fileformat.html#varint
LAST_SEVEN_BITS_MASK = 0b_0111_1111
CONTINUATION_BIT_MASK = 0b_1000_0000
VARINT_MAX_BYTES = 9

# https://www.sqlite.org/fileformat.html#storage_of_the_sql_database_schema
SCHEMA_COLUMN_COUNT = 5
SCHEMA_TABLE_TYPE = "table"

DBINFO_COMMAND = ".dbinfo"
TABLES_COMMAND = ".tables"
SCHEMA_COMMAND = ".schema"
COMMANDS = (DBINFO_COMMAND, TABLES_COMMAND, SCHEMA_COMMAND)

LOG_LEVEL_ENV_VAR = "SCHEMAVIEW_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"
