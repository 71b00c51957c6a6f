from pathlib import Path

import pytest

from qtdeploy.closure import ClosureState
from qtdeploy.toolkit import DeployLayout, locate_installation


CORE_PREFIX = b'/opt/Qt/5.15.2/gcc_64'
CORE_FIELD_WIDTH = 256


def core_contents():
    field = CORE_PREFIX.ljust(CORE_FIELD_WIDTH, b'\0')
    return b'\x7fELF' + b'\x01' * 60 + b'qt_prfxpath=' + field + b'\x02' * 40


MODULES = ('Core', 'Gui', 'Widgets', 'DBus', 'XcbQpa', 'Sql', 'Network')

PLUGINS = {
    'platforms': ('libqxcb.so', 'libqoffscreen.so'),
    'imageformats': ('libqgif.so', 'libqjpeg.so'),
    'sqldrivers': ('libqsqlite.so', 'libqsqlmysql.so', 'libqsqlpsql.so'),
}

TRANSLATIONS = ('qt_de.qm', 'qt_fr.qm', 'qt_ja.qm', 'qt_help_de.qm',
                'qtbase_de.qm', 'qtbase_fr.qm', 'qtdeclarative_ja.qm')


class FakeLister:
    """Dependency lister answering from a {file name: [modules]} table."""

    def __init__(self, links):
        self.links = links
        self.calls = []

    def __call__(self, binary):
        self.calls.append(Path(binary))
        return list(self.links.get(Path(binary).name, []))


class FakeQt:

    def __init__(self, root):
        self.prefix = root / 'qt'
        lib = self.prefix / 'lib'
        lib.mkdir(parents=True)
        for module_id in MODULES:
            f = lib / ('libQt5%s.so.5' % module_id)
            if module_id == 'Core':
                f.write_bytes(core_contents())
            else:
                f.write_bytes(b'\x7fELF module ' + module_id.encode())
        for category, names in PLUGINS.items():
            d = self.prefix / 'plugins' / category
            d.mkdir(parents=True)
            for name in names:
                (d / name).write_bytes(b'\x7fELF plugin ' + name.encode())
        tr = self.prefix / 'translations'
        tr.mkdir()
        for name in TRANSLATIONS:
            (tr / name).write_bytes(b'qm ' + name.encode())

        self.apps = root / 'apps'
        self.apps.mkdir()
        self.dest = root / 'deploy'
        self.installation = locate_installation(self.prefix)
        self.layout = DeployLayout(self.dest)

    def app(self, name='app'):
        f = self.apps / name
        f.write_bytes(b'\x7fELF app')
        return f

    def state(self, links, **kwargs):
        return ClosureState(self.installation, self.layout, FakeLister(links),
                            **kwargs)


@pytest.fixture
def qt(tmp_path):
    return FakeQt(tmp_path)
