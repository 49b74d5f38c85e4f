import logging
import sys

import click

from .core.click_factory import EXIT_OK, build_cli
from .core.errors import StatusCode
from .core.plugins import load_plugins
from .core.results import ResultObject

ENV_PREFIX = "ERRPACK"


def run(argv: list[str] | None = None) -> tuple[ResultObject, int]:
    """Programmatic entry point returning structured results and exit code."""

    argv = argv if argv is not None else sys.argv[1:]

    pkg = __package__ or __name__.split(".")[0]
    load_plugins(f"{pkg}.plugins")
    cli = build_cli(pkg, return_results=True)

    try:
        rv = cli.main(
            args=argv, prog_name=pkg, standalone_mode=False, auto_envvar_prefix=ENV_PREFIX
        )
    except click.ClickException as exc:
        exc.show()
        results = ResultObject(ok=False)
        results.fail(str(exc), code=StatusCode.E_INPUT_INVALID)
        return results, exc.exit_code

    # --help and a bare group invocation return an exit status, not results.
    if isinstance(rv, tuple):
        results, code = rv
        return results, int(code)
    return ResultObject(), int(rv or EXIT_OK)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""

    logging.basicConfig(stream=sys.stderr, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    _, code = run(argv)
    return code


if __name__ == "__main__":
    raise SystemExit(main())
