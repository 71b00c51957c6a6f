"""
Merge the translation catalogs of the deployed modules into one catalog per
language.
"""

import re

from .common import ex, log
from .modules import MODULES, lookup


BASE_CATALOG_REGEX = re.compile(r'^qt_([a-z]{2,3}(?:_[A-Z]{2})?)\.qm$')


def available_languages(translations_dir):
    """Languages for which the installation ships a base qt_<lang>.qm."""

    if not translations_dir.is_dir():
        return []
    langs = []
    for p in translations_dir.iterdir():
        m = BASE_CATALOG_REGEX.match(p.name)
        if m:
            langs.append(m.group(1))
    return sorted(langs)


def catalog_names(copied_modules, registry=MODULES):
    """Distinct catalog names of `copied_modules`, in module order."""

    names = []
    for module_id in copied_modules:
        catalog = lookup(module_id, registry).translation_catalog
        if catalog and catalog not in names:
            names.append(catalog)
    return names


def lconvert(output, inputs):
    ex(['lconvert', '-o', output] + list(inputs))


def aggregate(languages, copied_modules, translations_dir, dest_dir,
              merge=lconvert, dry_run=False, registry=MODULES):
    """
    For every language, merge the catalogs of `copied_modules` found in
    `translations_dir` into `dest_dir`/qt_<lang>.qm. Languages without any
    matching catalog produce no output. Returns the written catalogs.
    """

    catalogs = catalog_names(copied_modules, registry)
    log.debug('Translation catalogs: %s', ', '.join(catalogs) or 'none')

    written = []
    for lang in languages:
        inputs = []
        for catalog in catalogs:
            qm = translations_dir / ('%s_%s.qm' % (catalog, lang))
            if qm.is_file():
                inputs.append(qm)
        if not inputs:
            log.debug('No catalogs for language %s', lang)
            continue

        output = dest_dir / ('qt_%s.qm' % lang)
        if dry_run:
            log.info('Would merge %d catalog(s) into %s', len(inputs), output)
            continue
        log.info('Merging %d catalog(s) into %s', len(inputs), output)
        dest_dir.mkdir(parents=True, exist_ok=True)
        merge(output, inputs)
        written.append(output)
    return written
