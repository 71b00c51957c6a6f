"""
Make a deployed libQt5Core look for its plugins and resources relative to
itself.

libQt5Core embeds a fixed-size, null-terminated field holding the installation
prefix it was built against, introduced by PREFIX_MARKER. The prefix is replaced
by "." and null padding so the field, and therefore the whole file, keeps its
exact size.
"""

import os
import shutil
import tempfile

from .common import PatchError, PatchTargetNotFound, log
from .modules import PREFIX_MARKER


RELATIVE_PREFIX = b'.'


def patch_buffer(data, marker=PREFIX_MARKER):
    """
    Return a copy of `data` with the prefix field following `marker` replaced
    by the relative prefix, padded with nulls to the original field width.
    """

    start = data.find(marker)
    if start < 0:
        raise PatchTargetNotFound('Prefix marker %r not found' %
                                  marker.decode('ascii'))

    field_start = start + len(marker)
    field_end = data.find(b'\0', field_start)
    if field_end < 0:
        field_end = len(data)
    width = field_end - field_start
    if width < len(RELATIVE_PREFIX):
        raise PatchError('Prefix field at offset %#x is too narrow to patch' %
                         field_start)

    field = RELATIVE_PREFIX.ljust(width, b'\0')
    patched = bytearray(data)
    patched[field_start:field_end] = field
    if len(patched) != len(data):
        raise PatchError('Patching would change the file size')
    log.debug('Replacing prefix %r at offset %#x (%d bytes)',
              bytes(data[field_start:field_end]), field_start, width)
    return bytes(patched)


def patch(path):
    """
    Patch the core runtime module at `path` in place. The new contents are
    written to a temporary file next to it, which then replaces the original;
    the temporary file never outlives this call.
    """

    with open(path, 'rb') as f:
        data = f.read()
    try:
        patched = patch_buffer(data)
    except PatchError as e:
        raise type(e)('%s: %s' % (path, e)) from None

    fd, tmp = tempfile.mkstemp(prefix='.%s.' % path.name, dir=path.parent)
    try:
        with os.fdopen(fd, 'wb') as f:
            f.write(patched)
        shutil.copystat(path, tmp)
        os.replace(tmp, path)
    finally:
        if os.path.exists(tmp):
            os.unlink(tmp)
    log.info('Patched Qt prefix in %s', path)
