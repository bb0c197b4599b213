"""Run settings."""

from dataclasses import dataclass

from .codec import LEGACY_ENCODING

DEFAULT_LOG_FILE = "log.txt"
NAME_TABLE_FILE = "nametable.txt"

# A file is abandoned once this many write errors pile up
DEFAULT_MAX_ERRORS = 10


@dataclass
class MergeSettings:
    """Everything a batch run needs besides the three directories."""
    log_file: str = DEFAULT_LOG_FILE
    name_table_file: str = NAME_TABLE_FILE
    max_errors: int = DEFAULT_MAX_ERRORS
    script_encoding: str = LEGACY_ENCODING
    output_encoding: str = "utf-8"
    output_newline: str = "\r\n"     # scripts are reassembled on Windows
    translation_suffix: str = ".txt"
