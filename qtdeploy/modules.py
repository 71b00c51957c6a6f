"""
The Qt module registry.

Every Qt module that can show up in a dependency listing has exactly one
descriptor here, naming the plugin directories to scan when the module is
deployed and the translation catalog that carries its strings. A module that
is linked but missing from this table is a fatal error: deploying without its
plugins or translations would produce a bundle that breaks at runtime.
"""

from dataclasses import dataclass
from types import MappingProxyType
import re

from .common import UnknownModule


MODULE_FILE_REGEX = re.compile(r'^libQt5(\w+)\.so(?:\.\d+)*$')
CORE_RUNTIME_REGEX = re.compile(r'^libQt5Core\.so(?:\.\d+)*$')
MODULE_FILE_TEMPLATE = 'libQt5%s.so.5'

# Embedded in libQt5Core, followed by the installation prefix it was built
# against.
PREFIX_MARKER = b'qt_prfxpath='


@dataclass(frozen=True)
class ModuleDescriptor:
    id: str
    option_tag: str
    translation_catalog: str = ''
    plugin_categories: tuple = ()


# (id, option tag, catalog, plugin categories)
_MODULES = (
    ('3DAnimation', '3danimation', '', ()),
    ('3DCore', '3dcore', '', ()),
    ('3DExtras', '3dextras', '', ()),
    ('3DInput', '3dinput', '', ()),
    ('3DLogic', '3dlogic', '', ()),
    ('3DQuick', '3dquick', '', ()),
    ('3DQuickExtras', '3dquickextras', '', ()),
    ('3DQuickInput', '3dquickinput', '', ()),
    ('3DQuickRender', '3dquickrender', '', ()),
    ('3DRender', '3drender', '',
     ('geometryloaders', 'renderplugins', 'sceneparsers')),
    ('Bluetooth', 'bluetooth', 'qtconnectivity', ()),
    ('Charts', 'charts', '', ()),
    ('Concurrent', 'concurrent', 'qtbase', ()),
    ('Core', 'core', 'qtbase', ()),
    ('DataVisualization', 'datavisualization', '', ()),
    ('DBus', 'dbus', 'qtbase', ()),
    ('Designer', 'designer', 'designer', ('designer',)),
    ('DesignerComponents', 'designercomponents', '', ()),
    ('EglFSDeviceIntegration', 'eglfsdeviceintegration', '',
     ('egldeviceintegrations',)),
    ('EglFsKmsSupport', 'eglfskmssupport', '', ()),
    ('Gamepad', 'gamepad', '', ('gamepads',)),
    ('Gui', 'gui', 'qtbase',
     ('accessible', 'iconengines', 'imageformats', 'platforms',
      'platforminputcontexts', 'platformthemes', 'xcbglintegrations')),
    ('Help', 'help', 'qt_help', ()),
    ('Location', 'location', 'qtlocation', ('geoservices',)),
    ('Multimedia', 'multimedia', 'qtmultimedia',
     ('audio', 'mediaservice', 'playlistformats')),
    ('MultimediaGstTools', 'multimediagsttools', 'qtmultimedia', ()),
    ('MultimediaQuick', 'multimediaquick', 'qtmultimedia', ()),
    ('MultimediaWidgets', 'multimediawidgets', 'qtmultimedia', ()),
    ('Network', 'network', 'qtbase', ('bearer',)),
    ('NetworkAuth', 'networkauth', '', ()),
    ('Nfc', 'nfc', 'qtconnectivity', ()),
    ('OpenGL', 'opengl', 'qtbase', ()),
    ('Positioning', 'positioning', 'qtlocation', ('position',)),
    ('PrintSupport', 'printsupport', 'qtbase', ('printsupport',)),
    ('Qml', 'qml', 'qtdeclarative', ('qmltooling',)),
    ('QmlModels', 'qmlmodels', 'qtdeclarative', ()),
    ('QmlWorkerScript', 'qmlworkerscript', 'qtdeclarative', ()),
    ('Quick', 'quick', 'qtdeclarative', ('scenegraph',)),
    ('QuickControls2', 'quickcontrols2', 'qtquickcontrols2', ()),
    ('QuickParticles', 'quickparticles', 'qtdeclarative', ()),
    ('QuickShapes', 'quickshapes', 'qtdeclarative', ()),
    ('QuickTemplates2', 'quicktemplates2', 'qtquickcontrols2', ()),
    ('QuickTest', 'quicktest', 'qtbase', ()),
    ('QuickWidgets', 'quickwidgets', 'qtdeclarative', ()),
    ('RemoteObjects', 'remoteobjects', '', ()),
    ('Script', 'script', 'qtscript', ()),
    ('ScriptTools', 'scripttools', 'qtscript', ()),
    ('Scxml', 'scxml', '', ()),
    ('Sensors', 'sensors', '', ('sensors', 'sensorgestures')),
    ('SerialBus', 'serialbus', 'qtserialbus', ('canbus',)),
    ('SerialPort', 'serialport', 'qtserialport', ()),
    ('Sql', 'sql', 'qtbase', ('sqldrivers',)),
    ('Svg', 'svg', '', ()),
    ('Test', 'test', 'qtbase', ()),
    ('TextToSpeech', 'texttospeech', '', ('texttospeech',)),
    ('VirtualKeyboard', 'virtualkeyboard', 'qtvirtualkeyboard',
     ('virtualkeyboard',)),
    ('WaylandClient', 'waylandclient', 'qtwayland',
     ('wayland-decoration-client', 'wayland-graphics-integration-client',
      'wayland-shell-integration')),
    ('WaylandCompositor', 'waylandcompositor', 'qtwayland',
     ('wayland-graphics-integration-server',)),
    ('WebChannel', 'webchannel', '', ()),
    ('WebEngine', 'webengine', 'qtwebengine', ()),
    ('WebEngineCore', 'webenginecore', 'qtwebengine', ()),
    ('WebEngineWidgets', 'webenginewidgets', 'qtwebengine', ()),
    ('WebSockets', 'websockets', 'qtwebsockets', ()),
    ('WebView', 'webview', '', ('webview',)),
    ('Widgets', 'widgets', 'qtbase', ('styles',)),
    ('X11Extras', 'x11extras', '', ()),
    ('XcbQpa', 'xcbqpa', '', ()),
    ('Xml', 'xml', 'qtbase', ()),
    ('XmlPatterns', 'xmlpatterns', 'qtxmlpatterns', ()),
)


def _build_registry(entries):
    """
    Turn the raw table into read-only id and tag mappings, checking that
    identifiers and tags are unique and produce valid module file names.
    """

    by_id = {}
    by_tag = {}
    for module_id, tag, catalog, categories in entries:
        if module_id in by_id:
            raise ValueError('Duplicate module id %s' % module_id)
        if tag in by_tag:
            raise ValueError('Duplicate option tag %s' % tag)
        if not MODULE_FILE_REGEX.match(MODULE_FILE_TEMPLATE % module_id):
            raise ValueError('Module id %s does not form a module file name' %
                             module_id)
        desc = ModuleDescriptor(module_id, tag, catalog, tuple(categories))
        by_id[module_id] = desc
        by_tag[tag] = desc
    return MappingProxyType(by_id), MappingProxyType(by_tag)


MODULES, _MODULES_BY_TAG = _build_registry(_MODULES)


def lookup(module_id, registry=MODULES):
    """Return the descriptor for `module_id`, or raise UnknownModule."""
    try:
        return registry[module_id]
    except KeyError:
        raise UnknownModule('Unknown Qt module %s' % module_id) from None


def lookup_tag(tag):
    """Return the descriptor whose option tag is `tag`."""
    try:
        return _MODULES_BY_TAG[tag]
    except KeyError:
        raise UnknownModule('Unknown Qt module option %s' % tag) from None


def module_id_for_file(name):
    """
    Return the module identifier encoded in a library file name such as
    libQt5Widgets.so.5, or None if the name is not a Qt module.
    """
    m = MODULE_FILE_REGEX.match(name)
    if not m:
        return None
    return m.group(1)


def module_file_name(desc):
    return MODULE_FILE_TEMPLATE % desc.id


def is_core_runtime(path):
    return CORE_RUNTIME_REGEX.match(path.name) is not None
