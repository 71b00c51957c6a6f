"""
Describe what a run deployed.
"""

import json
import os

from .plan import TaskKind


LIST_MODES = ('source', 'target', 'relative', 'mapping')


def deployed(results):
    """Results of tasks that were copied, leaving out debug symbols."""
    return [r for r in results
            if r.was_copied and r.task.kind is not TaskKind.DEBUG_SYMBOL]


def deployed_files(results):
    return [{'source': str(r.task.source),
             'targetDirectory': str(r.task.dest.parent)}
            for r in deployed(results)]


def render_json(results):
    return json.dumps({'files': deployed_files(results)}, indent=4)


def render_list(results, mode, dest_dir):
    if mode not in LIST_MODES:
        raise ValueError('Unknown list mode %r' % mode)

    lines = []
    for r in deployed(results):
        source, target = r.task.source, r.task.dest
        if mode == 'source':
            lines.append(str(source))
        elif mode == 'target':
            lines.append(str(target))
        else:
            relative = os.path.relpath(target, dest_dir)
            if mode == 'relative':
                lines.append(relative)
            else:
                lines.append('"%s" "%s"' % (source, relative))
    return '\n'.join(lines)
