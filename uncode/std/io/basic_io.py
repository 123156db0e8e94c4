import os

from ...errors import ErrorKind
from ...logger import get_logger
from ...types import NULL, Boolean, String, Value, new_error

log = get_logger('builtin')


class BasicIO:
    """Whole-file operations backing the I/O builtins.

    Host failures are reported as IOFailure error values instead of
    exceptions.
    """
    def __init__(self, encoding: str = 'utf-8'):
        self.encoding = encoding

    def read_file(self, filename: str) -> Value:
        try:
            with open(filename, 'r', encoding=self.encoding) as f:
                return String(f.read())
        except OSError as e:
            log.debug('read_file %s failed: %s', filename, e)
            return new_error(ErrorKind.IO_FAILURE, f"cannot read file {filename}: {e.strerror or e}")

    def write_file(self, filename: str, data: str) -> Value:
        try:
            with open(filename, 'w', encoding=self.encoding) as f:
                f.write(data)
            return NULL
        except OSError as e:
            log.debug('write_file %s failed: %s', filename, e)
            return new_error(ErrorKind.IO_FAILURE, f"cannot write file {filename}: {e.strerror or e}")

    def file_exists(self, filename: str) -> Value:
        return Boolean(os.path.exists(filename))
