"""
Copy the Qt modules, plugins and translations needed by one or more
applications into an application-local directory.
"""

from argparse import ArgumentParser
from pathlib import Path
import logging
import sys

from .closure import ClosureState, build_closure, include_modules
from .common import TRACE, DeployError, MissingDependency, log
from .deps import BACKENDS, DependencyLister
from .plan import CopyPolicy, execute
from .report import LIST_MODES, render_json, render_list
from .toolkit import DeployLayout, locate_installation
from .translations import aggregate, available_languages


VERBOSITY_LEVELS = (logging.ERROR, logging.INFO, logging.DEBUG, TRACE)


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = ArgumentParser(description='Deploy the Qt runtime needed by '
                                        'an application')
    parser.add_argument('binaries', nargs='+', type=Path, metavar='BINARY',
                        help='Application executables')
    parser.add_argument('--dest', required=True, type=Path,
                        help='Destination directory')
    parser.add_argument('--qt-dir', default=None,
                        help='Qt installation prefix (default: $QTDIR)')
    parser.add_argument('--include', action='append', default=[],
                        metavar='MODULE',
                        help='Deploy a module even if nothing links it')
    parser.add_argument('--no-plugins', action='store_true',
                        help='Do not copy plugins')
    parser.add_argument('--no-libraries', action='store_true',
                        help='Do not copy Qt modules')
    parser.add_argument('--no-translations', action='store_true',
                        help='Do not merge translations')
    parser.add_argument('--languages', default=None,
                        help='Comma-separated languages to deploy '
                             '(default: all installed)')
    parser.add_argument('--debug-symbols', action='store_true',
                        help='Also copy .debug files next to the libraries')
    parser.add_argument('--force', action='store_true',
                        help='Copy files even if they are up to date')
    parser.add_argument('--dry-run', action='store_true',
                        help='Only show what would be done')
    parser.add_argument('--backend', choices=BACKENDS, default='ldd',
                        help='How to list linked libraries')
    parser.add_argument('--json', action='store_true',
                        help='Print the deployed files as JSON')
    parser.add_argument('--list', choices=LIST_MODES, default=None,
                        help='Print the deployed files, one per line '
                             '(overrides --json)')
    parser.add_argument('--verbose', type=int, default=1,
                        help='Verbosity level 0-3 (default: 1)')

    return parser.parse_args(argv)


def configure_logging(verbosity):
    """Set up the qtdeploy logger, clamping `verbosity` to 0-3."""
    verbosity = max(0, min(verbosity, len(VERBOSITY_LEVELS) - 1))
    level = VERBOSITY_LEVELS[verbosity]

    log.setLevel(level)
    log.propagate = False

    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter('%(message)s'))

    log.handlers.clear()
    log.addHandler(handler)
    return verbosity


def deploy(args):
    """Run the deployment described by `args`, returning all task results."""
    inst = locate_installation(args.qt_dir)
    layout = DeployLayout(args.dest.resolve())
    policy = CopyPolicy(copy_modules=not args.no_libraries,
                        copy_plugins=not args.no_plugins,
                        force=args.force,
                        dry_run=args.dry_run)
    state = ClosureState(inst, layout,
                         DependencyLister(inst.lib_dir, args.backend),
                         copy_debug_symbols=args.debug_symbols)

    if args.languages:
        languages = [l.strip() for l in args.languages.split(',') if l.strip()]
    else:
        languages = available_languages(inst.translations_dir)

    log.info('Using output dir %s', layout.dest_dir)
    include_modules(state, args.include)

    results = []
    for binary in args.binaries:
        binary = binary.resolve()
        if not binary.is_file():
            raise MissingDependency('Application %s does not exist' % binary)

        log.info('Deploying %s', binary)
        state.begin_application()
        build_closure(state, binary)
        results.extend(execute(state.plan.tasks[len(results):], policy))

        if not args.no_translations:
            aggregate(languages, state.copied_modules, inst.translations_dir,
                      layout.translations_dir, dry_run=args.dry_run)
    return results


def main(argv=None):
    """The main function."""
    args = parse_args(argv)
    configure_logging(args.verbose)

    try:
        results = deploy(args)
    except DeployError as e:
        log.error('ERROR: %s', e)
        return 1

    if args.list:
        out = render_list(results, args.list, args.dest.resolve())
        if out:
            print(out)
    elif args.json:
        print(render_json(results))
    return 0


if __name__ == '__main__':
    sys.exit(main())
