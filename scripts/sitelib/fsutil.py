"""
Atomic file output.

Every file the build produces goes through write_file(), so a reader of the
output tree never sees a half-written page.
"""

import os
import tempfile


TEMP_PREFIX = ".tmp-"


def write_file(path, data):
    """
    Write bytes to path via a temp file in the same directory plus rename.

    Parent directories are created as needed. On failure the temp file is
    removed and the exception propagates; the destination keeps whatever
    it held before (or stays absent).
    """
    directory = os.path.dirname(path) or "."
    os.makedirs(directory, exist_ok=True)

    fd, tmp_path = tempfile.mkstemp(prefix=TEMP_PREFIX, dir=directory)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.remove(tmp_path)
        except FileNotFoundError:
            pass
        raise
