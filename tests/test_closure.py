import pytest

from qtdeploy.closure import build_closure, include_modules
from qtdeploy.common import MissingDependency, UnknownModule
from qtdeploy.plan import TaskKind


def names(state):
    return [t.source.name for t in state.plan]


def test_linked_modules_before_their_plugins(qt):
    state = qt.state({'app': ['libQt5Sql.so.5', 'libQt5Core.so.5']})
    build_closure(state, qt.app())

    assert names(state) == ['libQt5Sql.so.5', 'libQt5Core.so.5',
                            'libqsqlite.so', 'libqsqlmysql.so',
                            'libqsqlpsql.so']
    kinds = [t.kind for t in state.plan]
    assert kinds == [TaskKind.MODULE] * 2 + [TaskKind.PLUGIN] * 3
    assert list(state.copied_modules) == ['Sql', 'Core']


def test_plugins_follow_module_order(qt):
    state = qt.state({
        'app': ['libQt5Gui.so.5', 'libQt5Sql.so.5'],
        'libqxcb.so': ['libQt5XcbQpa.so.5', 'libQt5DBus.so.5'],
    })
    build_closure(state, qt.app())

    assert names(state) == ['libQt5Gui.so.5', 'libQt5Sql.so.5', 'libqgif.so',
                            'libqjpeg.so', 'libqoffscreen.so', 'libqxcb.so',
                            'libQt5XcbQpa.so.5', 'libQt5DBus.so.5',
                            'libqsqlite.so', 'libqsqlmysql.so',
                            'libqsqlpsql.so']


def test_destinations(qt):
    state = qt.state({'app': ['libQt5Sql.so.5']})
    build_closure(state, qt.app())

    module = state.plan.of_kind(TaskKind.MODULE)[0]
    plugin = state.plan.of_kind(TaskKind.PLUGIN)[0]
    assert module.dest == qt.dest / 'lib' / 'libQt5Sql.so.5'
    assert plugin.dest == qt.dest / 'plugins' / 'sqldrivers' / 'libqsqlite.so'
    assert plugin.source == \
        qt.installation.plugin_dir / 'sqldrivers' / 'libqsqlite.so'


def test_plugin_pulls_in_new_modules(qt):
    state = qt.state({
        'app': ['libQt5Gui.so.5'],
        'libqxcb.so': ['libQt5XcbQpa.so.5', 'libQt5DBus.so.5'],
    })
    build_closure(state, qt.app())

    assert names(state) == ['libQt5Gui.so.5', 'libqgif.so', 'libqjpeg.so',
                            'libqoffscreen.so', 'libqxcb.so',
                            'libQt5XcbQpa.so.5', 'libQt5DBus.so.5']
    assert list(state.copied_modules) == ['Gui', 'XcbQpa', 'DBus']


def test_cycle_terminates(qt):
    state = qt.state({
        'app': ['libQt5Gui.so.5'],
        'libqxcb.so': ['libQt5Gui.so.5', 'libQt5Core.so.5'],
        'libqoffscreen.so': ['libQt5Gui.so.5'],
    })
    build_closure(state, qt.app())

    assert names(state).count('libQt5Gui.so.5') == 1
    assert 'libQt5Core.so.5' in names(state)


def test_each_file_analyzed_once(qt):
    state = qt.state({
        'app': ['libQt5Gui.so.5', 'libQt5Sql.so.5'],
        'other': ['libQt5Sql.so.5', 'libQt5Gui.so.5', 'libQt5Core.so.5'],
        'libqxcb.so': ['libQt5Gui.so.5'],
    })
    build_closure(state, qt.app('app'))
    state.begin_application()
    build_closure(state, qt.app('other'))

    sources = [t.source for t in state.plan]
    assert len(sources) == len(set(sources))
    assert len(state.lister.calls) == len(set(state.lister.calls))
    assert names(state)[-1] == 'libQt5Core.so.5'


def test_copied_modules_reset_per_application(qt):
    state = qt.state({
        'app': ['libQt5Sql.so.5'],
        'other': ['libQt5Core.so.5', 'libQt5Sql.so.5'],
    })
    build_closure(state, qt.app('app'))
    assert list(state.copied_modules) == ['Sql']

    state.begin_application()
    build_closure(state, qt.app('other'))
    assert list(state.copied_modules) == ['Core', 'Sql']


def test_unknown_module(qt):
    (qt.installation.lib_dir / 'libQt5Frobnicate.so.5').write_bytes(b'x')
    state = qt.state({'app': ['libQt5Core.so.5', 'libQt5Frobnicate.so.5']})

    with pytest.raises(UnknownModule, match='Frobnicate'):
        build_closure(state, qt.app())
    assert names(state) == ['libQt5Core.so.5']


def test_missing_module_file(qt):
    state = qt.state({'app': ['libQt5Svg.so.5']})

    with pytest.raises(MissingDependency, match='libQt5Svg.so.5'):
        build_closure(state, qt.app())
    assert len(state.plan) == 0


def test_debug_symbols(qt):
    lib = qt.installation.lib_dir
    (lib / 'libQt5Core.so.5.debug').write_bytes(b'dwarf')

    state = qt.state({'app': ['libQt5Core.so.5', 'libQt5DBus.so.5']},
                     copy_debug_symbols=True)
    build_closure(state, qt.app())

    core, debug, dbus = state.plan.tasks
    assert debug.kind is TaskKind.DEBUG_SYMBOL
    assert debug.is_debug_sibling
    assert debug.source == lib / 'libQt5Core.so.5.debug'
    assert debug.dest == core.dest.with_name('libQt5Core.so.5.debug')
    assert dbus.kind is TaskKind.MODULE


def test_debug_symbols_disabled(qt):
    (qt.installation.lib_dir / 'libQt5Core.so.5.debug').write_bytes(b'dwarf')
    state = qt.state({'app': ['libQt5Core.so.5']})
    build_closure(state, qt.app())

    assert names(state) == ['libQt5Core.so.5']


def test_include_modules(qt):
    state = qt.state({'app': ['libQt5Core.so.5']})
    include_modules(state, ['sql'])
    state.begin_application()
    build_closure(state, qt.app())

    assert names(state)[0] == 'libQt5Sql.so.5'
    assert list(state.copied_modules) == ['Sql', 'Core']


def test_include_unknown_tag(qt):
    state = qt.state({})
    with pytest.raises(UnknownModule):
        include_modules(state, ['nosuchmodule'])
