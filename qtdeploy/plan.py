"""
The copy plan: an ordered list of copy tasks built by the closure builder, and
the evaluator that carries it out.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
import shutil

from .common import MissingDependency, log
from .modules import is_core_runtime
from .patcher import patch


class TaskKind(Enum):
    MODULE = 'module'
    PLUGIN = 'plugin'
    DEBUG_SYMBOL = 'debug'


@dataclass(frozen=True)
class CopyTask:
    kind: TaskKind
    source: Path
    dest: Path
    is_debug_sibling: bool = False


class CopyPlan:
    """
    Append-only sequence of copy tasks. No two tasks share a source path; the
    source set doubles as the visited set of the closure traversal.
    """

    def __init__(self):
        self.tasks = []
        self._sources = set()

    def __contains__(self, source):
        return Path(source) in self._sources

    def __iter__(self):
        return iter(self.tasks)

    def __len__(self):
        return len(self.tasks)

    def add(self, task):
        if task.source in self._sources:
            raise ValueError('%s is already scheduled' % task.source)
        self._sources.add(task.source)
        self.tasks.append(task)

    def of_kind(self, kind):
        return [t for t in self.tasks if t.kind is kind]


@dataclass(frozen=True)
class CopyPolicy:
    copy_modules: bool = True
    copy_plugins: bool = True
    force: bool = False
    dry_run: bool = False

    def allows(self, kind):
        if kind is TaskKind.MODULE:
            return self.copy_modules
        if kind is TaskKind.PLUGIN:
            return self.copy_plugins
        return True


# Outcomes of a single task.
COPIED = 'copied'
UP_TO_DATE = 'up-to-date'
FILTERED = 'filtered'


@dataclass(frozen=True)
class ExecutionResult:
    task: CopyTask
    status: str

    @property
    def was_copied(self):
        return self.status == COPIED


def needs_copy(source, dest, force=False):
    """
    A file needs copying when forced, when the destination is missing, or
    when the source was modified after the destination.
    """

    try:
        source_mtime = source.stat().st_mtime_ns
    except FileNotFoundError:
        raise MissingDependency('%s does not exist' % source) from None
    if force:
        return True
    try:
        dest_mtime = dest.stat().st_mtime_ns
    except FileNotFoundError:
        return True
    return source_mtime > dest_mtime


def copy_file(source, dest):
    """
    Copy keeping permissions and timestamps, patching the core module. A core
    module that fails to patch is removed again, so a later run cannot take
    it for up to date.
    """

    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(source, dest)
    if is_core_runtime(dest):
        try:
            patch(dest)
        except Exception:
            dest.unlink()
            raise


def execute(plan, policy):
    """
    Carry out every task of `plan` in order and return one ExecutionResult per
    task. A debug symbol task shares the filter decision of the task it is
    paired with.
    """

    results = []
    owner_allowed = True
    for task in plan:
        if task.kind is TaskKind.DEBUG_SYMBOL:
            allowed = owner_allowed
        else:
            allowed = owner_allowed = policy.allows(task.kind)

        if not allowed:
            log.debug('Skipping %s (%s copying disabled)', task.source,
                      task.kind.value)
            results.append(ExecutionResult(task, FILTERED))
            continue

        if not needs_copy(task.source, task.dest, policy.force):
            log.info('Up to date: %s', task.dest)
            results.append(ExecutionResult(task, UP_TO_DATE))
            continue

        if policy.dry_run:
            log.info('Would copy %s -> %s', task.source, task.dest)
        else:
            log.info('Copying %s -> %s', task.source, task.dest)
            copy_file(task.source, task.dest)
        results.append(ExecutionResult(task, COPIED))
    return results
