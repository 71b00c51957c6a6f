"""
Shared helpers: the external command runner and the error hierarchy.
"""

import logging
import os
import shlex
import subprocess


TRACE = 5
logging.addLevelName(TRACE, 'TRACE')

log = logging.getLogger('qtdeploy')


class DeployError(Exception):
    """Base class for every fatal deployment condition."""


class ToolkitNotFound(DeployError):
    """The Qt installation could not be located."""


class UnknownModule(DeployError):
    """A discovered module has no entry in the module registry."""


class MissingDependency(DeployError):
    """A required module file is not present in the installation."""


class PatchError(DeployError):
    """The core runtime module could not be patched."""


class PatchTargetNotFound(PatchError):
    """The core runtime module lacks the embedded prefix marker."""


class ToolError(DeployError):
    """An external tool failed or could not be run."""


def ex(cmd, env=None):
    """
    Execute a given command (list of arguments), returning stdout if
    succesful and raising ToolError otherwise. `env` holds variables to set on
    top of the current environment.
    """

    full_env = None
    if env:
        full_env = os.environ.copy()
        full_env.update(env)

    log.log(TRACE, '$ %s', ' '.join(shlex.quote(str(c)) for c in cmd))
    try:
        p = subprocess.run([str(c) for c in cmd], stdout=subprocess.PIPE,
                           stderr=subprocess.PIPE, env=full_env, check=False)
    except OSError as e:
        raise ToolError('Could not run %s: %s' % (cmd[0], e)) from e

    out = p.stdout.decode('utf8', errors='replace')
    log.log(TRACE, '%s', out.rstrip())
    if p.returncode:
        err = p.stderr.decode('utf8', errors='replace').strip()
        raise ToolError("Error while executing command '%s': %d: %s" %
                        (' '.join(str(c) for c in cmd), p.returncode, err))
    return out
