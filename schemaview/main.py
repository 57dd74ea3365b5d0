import logging
import os
import sys

from schemaview.consts import (
    COMMANDS,
    DBINFO_COMMAND,
    DEFAULT_LOG_LEVEL,
    LOG_LEVEL_ENV_VAR,
    SCHEMA_COMMAND,
    TABLES_COMMAND,
)
from schemaview.exceptions import SchemaViewError, UsageError
from schemaview.schema import describe, list_tables, table_schemas

from typing import List, Optional

logger = logging.getLogger(__name__)


def parse_args(argv: List[str]):
    if len(argv) < 2:
        raise UsageError("Missing <database path> and <command>")
    if len(argv) < 3:
        raise UsageError("Missing <command>")

    database_file_path, command = argv[1], argv[2]
    if command not in COMMANDS:
        raise UsageError(f"Missing or invalid command passed: {command}")

    return database_file_path, command


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv if argv is None else argv

    try:
        database_file_path, command = parse_args(argv)

        with open(database_file_path, "rb") as database_file:
            logger.debug("Running %s on %s", command, database_file_path)

            if command == DBINFO_COMMAND:
                page_size, cell_count = describe(database_file)
                print(f"database page size: {page_size}")
                print(f"number of tables: {cell_count}")
            elif command == TABLES_COMMAND:
                for table_name in list_tables(database_file):
                    print(table_name)
            elif command == SCHEMA_COMMAND:
                for creation_query in table_schemas(database_file):
                    print(f"{creation_query};")
    except (SchemaViewError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    return 0


def run():
    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(
            logging,
            os.environ.get(LOG_LEVEL_ENV_VAR, DEFAULT_LOG_LEVEL).upper(),
            logging.WARNING,
        ),
        format="%(levelname)s %(name)s: %(message)s",
    )
    sys.exit(main())


if __name__ == "__main__":
    run()
