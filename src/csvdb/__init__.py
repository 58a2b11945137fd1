"""Record store backed by a flat delimited text file.

File layout (header = true, defaults shown):
    id,name,status,      # column names, trailing delimiter
    1,alpha,open,        # one record per line, values are plain strings
    2,beta,done,

Every call re-reads the whole file; every mutation rewrites it.
Values must not contain the delimiter or the line separator (no quoting).
Single writer per file: one CsvStore instance serialises its own calls.
"""

from csvdb.codec import decode, encode
from csvdb.config import CsvConfig, InvalidConfigError, init_config, load_config
from csvdb.matching import ByFields, ById
from csvdb.storage import LocalStorage, MemoryStorage
from csvdb.store import CsvStore

__all__ = [
    "ByFields",
    "ById",
    "CsvConfig",
    "CsvStore",
    "InvalidConfigError",
    "LocalStorage",
    "MemoryStorage",
    "decode",
    "encode",
    "init_config",
    "load_config",
]
