"""
List the Qt modules a binary links against.

Two backends are available: `ldd`, which asks the dynamic linker (with the Qt
library directory first in its search path, so a system-wide Qt is never picked
up instead), and `elf`, which reads the DT_NEEDED entries of the binary
directly.
"""

import os
import re

from elftools.common.exceptions import ELFError
from elftools.elf.dynamic import DynamicSection
from elftools.elf.elffile import ELFFile

from .common import MissingDependency, ToolError, ex, log
from .modules import module_id_for_file


LDD_REGEX = re.compile(r'^\s*(\S+) => (/\S+)')
LDD_NOT_FOUND_REGEX = re.compile(r'^\s*(\S+) => not found')

BACKENDS = ('ldd', 'elf')


def get_library_deps(binary, lib_dir):
    """
    Run ldd on `binary` and return the sonames it resolves, in output order.
    Unresolved Qt modules are fatal; other unresolved libraries are not ours to
    deploy and are ignored.
    """

    search_path = str(lib_dir)
    if os.environ.get('LD_LIBRARY_PATH'):
        search_path += os.pathsep + os.environ['LD_LIBRARY_PATH']

    deps = []
    out = ex(['ldd', binary], env={'LD_LIBRARY_PATH': search_path})
    for l in out.split('\n'):
        m = LDD_NOT_FOUND_REGEX.search(l)
        if m:
            missing_lib = m.group(1)
            if module_id_for_file(missing_lib) is not None:
                raise MissingDependency('Could not find %s needed by %s' %
                                        (missing_lib, binary))
            log.debug('Ignoring unresolved non-Qt library %s', missing_lib)
            continue

        m = LDD_REGEX.search(l)
        if not m:
            continue
        deps.append(m.group(1))
    return deps


def get_needed(binary):
    """Return the DT_NEEDED entries of an ELF binary."""

    needed = []
    try:
        with open(binary, 'rb') as f:
            e = ELFFile(f)
            for sec in e.iter_sections():
                if not isinstance(sec, DynamicSection):
                    continue
                for tag in sec.iter_tags():
                    if tag.entry.d_tag == 'DT_NEEDED':
                        needed.append(tag.needed)
    except ELFError as e:
        raise ToolError('Could not read %s as ELF: %s' % (binary, e)) from e
    except OSError as e:
        raise ToolError('Could not open %s: %s' % (binary, e)) from e
    return needed


class DependencyLister:
    """
    Callable returning the Qt module file names directly linked by a binary,
    deduplicated and in the order the backend reports them.
    """

    def __init__(self, lib_dir, backend='ldd'):
        if backend not in BACKENDS:
            raise ValueError('Unknown dependency backend %r' % backend)
        self.lib_dir = lib_dir
        self.backend = backend

    def __call__(self, binary):
        if self.backend == 'ldd':
            names = get_library_deps(binary, self.lib_dir)
        else:
            names = get_needed(binary)

        modules = []
        for name in names:
            name = os.path.basename(name)
            if module_id_for_file(name) is None or name in modules:
                continue
            modules.append(name)
        log.debug('%s links %s', binary, ', '.join(modules) or 'no Qt modules')
        return modules
