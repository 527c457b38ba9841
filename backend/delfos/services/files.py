import os
import tempfile

TEMP_SUFFIX = '.tmp'
# "." + name + "." + 8 random characters from mkstemp + ".tmp"
TEMP_NAME_OVERHEAD = 2 + 8 + len(TEMP_SUFFIX)
DEFAULT_MODE = 0o644


def atomic_write(path: str, content: str) -> None:
    """Replace ``path`` with ``content`` in one step.

    The data goes to a temp file in the same directory first and is then
    renamed over the target, so readers see the old file or the new one.
    The target keeps its permission bits; new files get 0644.
    """
    directory = os.path.dirname(os.path.abspath(path))
    try:
        mode = os.stat(path).st_mode & 0o777
    except FileNotFoundError:
        mode = DEFAULT_MODE
    fd, tmp_path = tempfile.mkstemp(dir=directory, prefix='.' + os.path.basename(path) + '.', suffix=TEMP_SUFFIX)
    try:
        with os.fdopen(fd, 'w', encoding='utf-8', newline='\n') as fh:
            fh.write(content)
            fh.flush()
            os.fsync(fh.fileno())
        # mkstemp creates 0600
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except FileNotFoundError:
            pass
        raise
