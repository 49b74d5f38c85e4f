import importlib
import logging
import pkgutil

import click

log = logging.getLogger(__name__)


def load_plugins(package: str) -> list[str]:
    """Import every module in ``package`` so their ``@command`` handlers register.

    A module that fails to import is reported on stderr and skipped. Returns
    the names of the modules that loaded.
    """

    pkg = importlib.import_module(package)
    loaded: list[str] = []
    for m in sorted(pkgutil.iter_modules(pkg.__path__, prefix=f"{package}."), key=lambda x: x.name):
        if m.ispkg:
            continue
        try:
            importlib.import_module(m.name)
        except Exception as e:
            click.echo(f"Warning: plugin import failed: {m.name} ({e!r})", err=True)
            continue
        log.debug("loaded plugin %s", m.name)
        loaded.append(m.name)
    return loaded
