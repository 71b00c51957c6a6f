"""
Qt installation and deployment directory layout.
"""

from dataclasses import dataclass
from pathlib import Path
import os

from .common import ToolkitNotFound, log


@dataclass(frozen=True)
class ToolkitInstallation:
    prefix: Path
    lib_dir: Path
    plugin_dir: Path
    translations_dir: Path


@dataclass(frozen=True)
class DeployLayout:
    """Where each kind of file ends up below the destination directory."""

    dest_dir: Path
    lib_subdir: str = 'lib'
    plugin_subdir: str = 'plugins'
    translations_subdir: str = 'translations'

    @property
    def lib_dir(self) -> Path:
        return self.dest_dir / self.lib_subdir

    @property
    def plugin_dir(self) -> Path:
        return self.dest_dir / self.plugin_subdir

    @property
    def translations_dir(self) -> Path:
        return self.dest_dir / self.translations_subdir


def locate_installation(prefix=None) -> ToolkitInstallation:
    """
    Resolve the Qt installation rooted at `prefix`, falling back to the QTDIR
    environment variable. Only the library directory is mandatory; an
    installation without plugins or translations simply contributes none.
    """

    if prefix is None:
        prefix = os.environ.get('QTDIR')
    if not prefix:
        raise ToolkitNotFound('No Qt installation given (use --qt-dir or set '
                              'QTDIR)')

    prefix = Path(prefix).resolve()
    if not prefix.is_dir():
        raise ToolkitNotFound('Qt installation %s does not exist' % prefix)

    lib_dir = prefix / 'lib'
    if not lib_dir.is_dir():
        raise ToolkitNotFound('Qt installation %s has no lib directory' %
                              prefix)

    inst = ToolkitInstallation(prefix=prefix,
                               lib_dir=lib_dir,
                               plugin_dir=prefix / 'plugins',
                               translations_dir=prefix / 'translations')
    log.debug('Using Qt installation %s', prefix)
    return inst
