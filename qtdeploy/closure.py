"""
Compute the set of Qt modules and plugins an application needs.

Starting from an application binary, every directly linked Qt module is
scheduled for copying, then every plugin in the plugin categories the module
owns, and each plugin is analyzed in turn since plugins can link modules that
the application itself does not. Anything already in the plan is neither
scheduled nor analyzed again, which also stops the traversal on cycles (a
plugin linking the module that owns it).
"""

from pathlib import Path

from .common import MissingDependency, log
from .modules import MODULES, lookup, lookup_tag, module_file_name, \
    module_id_for_file
from .plan import CopyPlan, CopyTask, TaskKind


DEBUG_SUFFIX = '.debug'
PLUGIN_SUFFIX = '.so'


class ClosureState:
    """
    Everything the closure builder accumulates during one run. The plan spans
    all applications of the run; the copied module set is per application.
    """

    def __init__(self, installation, layout, lister, copy_debug_symbols=False,
                 registry=MODULES):
        self.installation = installation
        self.layout = layout
        self.lister = lister
        self.copy_debug_symbols = copy_debug_symbols
        self.registry = registry
        self.plan = CopyPlan()
        self.included = []
        self.copied_modules = {}

    def begin_application(self):
        """Reset the copied module set before analyzing the next binary."""
        self.copied_modules = dict.fromkeys(self.included)

    def schedule(self, kind, source, dest):
        task = CopyTask(kind, source, dest)
        self.plan.add(task)
        log.debug('Scheduled %s %s', kind.value, source)

        debug_source = source.with_name(source.name + DEBUG_SUFFIX)
        if self.copy_debug_symbols and debug_source.is_file():
            self.plan.add(CopyTask(TaskKind.DEBUG_SYMBOL, debug_source,
                                   dest.with_name(dest.name + DEBUG_SUFFIX),
                                   is_debug_sibling=True))
        return task


def plugin_files(category_dir):
    """Plugin files of one category, in a stable order."""

    if not category_dir.is_dir():
        return []
    return sorted(p for p in category_dir.iterdir()
                  if p.is_file() and p.name.endswith(PLUGIN_SUFFIX))


def add_module(state, name):
    """
    Schedule the Qt module file `name` unless it is already scheduled. Returns
    its descriptor when newly scheduled, None otherwise.
    """

    desc = lookup(module_id_for_file(name), state.registry)
    state.copied_modules[desc.id] = None

    source = state.installation.lib_dir / name
    if source in state.plan:
        return None
    if not source.exists():
        raise MissingDependency('%s does not exist' % source)

    state.schedule(TaskKind.MODULE, source, state.layout.lib_dir / name)
    return desc


def add_plugins(state, desc):
    """Schedule and analyze every plugin of the categories `desc` owns."""

    for category in desc.plugin_categories:
        category_dir = state.installation.plugin_dir / category
        plugins = plugin_files(category_dir)
        log.debug('Module %s: %d plugin(s) in %s', desc.id, len(plugins),
                  category)
        for plugin in plugins:
            if plugin in state.plan:
                continue
            state.schedule(TaskKind.PLUGIN, plugin,
                           state.layout.plugin_dir / category / plugin.name)
            build_closure(state, plugin)


def add_modules(state, names):
    # All modules first, then their plugins in module order.
    scheduled = []
    for name in names:
        desc = add_module(state, name)
        if desc is not None:
            scheduled.append(desc)
    for desc in scheduled:
        add_plugins(state, desc)


def build_closure(state, binary):
    """
    Add every Qt module linked by `binary`, and transitively everything those
    modules' plugins link, to `state.plan`. The linked modules are scheduled
    in link order before any of their plugins.
    """

    binary = Path(binary)
    log.debug('Analyzing %s', binary)
    add_modules(state, state.lister(binary))


def include_modules(state, tags):
    """
    Schedule modules named by option tag, as if an application linked them.
    They are part of every application's copied module set.
    """

    names = []
    for tag in tags:
        desc = lookup_tag(tag)
        if desc.id not in state.included:
            state.included.append(desc.id)
        names.append(module_file_name(desc))
    add_modules(state, names)
