import inspect
import json
import logging
from typing import Any, Callable, cast, get_type_hints

import click

from .dispatch import REGISTRY, Registry
from .errors import CodecError, StatusCode
from .results import ResultObject

log = logging.getLogger(__name__)

PACKAGE_LOGGER = __name__.split(".")[0]
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

EXIT_OK = 0
EXIT_INPUT = 1
EXIT_FAILURE = 2
EXIT_BUG = 70
EXIT_INTERRUPTED = 130


def int_literal(text: str) -> int:
    """Read a decimal (leading zeros allowed) or ``0x``/``0o``/``0b`` integer."""

    try:
        return int(text, 10)
    except ValueError:
        return int(text, 0)


class IntLiteral(click.ParamType):
    """Integer given in decimal or with a ``0x``, ``0o`` or ``0b`` prefix."""

    name = "integer"

    def convert(self, value: Any, param: click.Parameter | None, ctx: click.Context | None) -> int:
        if isinstance(value, int):
            return value
        try:
            return int_literal(str(value))
        except ValueError:
            self.fail(f"{value!r} is not an integer literal", param, ctx)


INT_LITERAL = IntLiteral()


def _flag(name: str) -> str:
    return "--" + name.replace("_", "-")


def _param_type(ann: Any) -> click.ParamType:
    if ann is int:
        return INT_LITERAL
    if ann is float:
        return click.FLOAT
    return click.STRING


def _render(results: ResultObject, *, output: str, quiet: bool) -> None:
    if quiet:
        return
    if output == "json":
        click.echo(json.dumps({"ok": results.ok, "events": results.events}, default=str))
        return

    for ev in results.events:
        kind = ev.get("kind", "event")
        code = ev.get("code")
        code_num = ev.get("code_num")
        code_part = f" ({code}:{code_num})" if code or code_num is not None else ""
        msg = ev.get("message")
        details_map = ev.get("details", {})
        tail = " ".join(f"{k}={v}" for k, v in details_map.items())
        line = f"[{kind}]" + code_part + (f" {msg}" if msg else "") + (f" {tail}" if tail else "")
        click.echo(line)


def _exit_code_from_events(results: ResultObject, *, bug: bool) -> int:
    if bug:
        return EXIT_BUG
    if results.ok:
        return EXIT_OK

    # 1xxx: input -> 1, anything else -> 2
    code_nums = [
        ev["code_num"]
        for ev in results.events
        if ev.get("kind") == "error" and isinstance(ev.get("code_num"), int)
    ]
    if any(1000 <= n < 2000 for n in code_nums):
        return EXIT_INPUT
    return EXIT_FAILURE


def _check_signature(verb: str, params: list[inspect.Parameter]) -> None:
    # fn(results, *, ...)
    if not params:
        raise RuntimeError(f"{verb}: missing results parameter")
    if params[0].kind not in (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
    ):
        raise RuntimeError(f"{verb}: first param must be positional 'results'")
    for p in params[1:]:
        if p.kind is not inspect.Parameter.KEYWORD_ONLY:
            raise RuntimeError(f"{verb}: params after results must be keyword-only")


def _make_callback(fn: Callable[..., Any], *, return_results: bool) -> Callable[..., Any]:
    def callback(**kwargs: Any) -> tuple[ResultObject, int] | None:
        ctx = click.get_current_context()
        ctx_obj = cast(dict[str, Any], ctx.obj or {})
        output = str(ctx_obj.get("output", "text"))
        quiet = bool(ctx_obj.get("quiet", False))

        results = ResultObject()
        bug = False

        try:
            fn(results, **kwargs)
        except click.ClickException:
            raise
        except KeyboardInterrupt:
            raise SystemExit(EXIT_INTERRUPTED) from None
        except CodecError as e:
            results.fail_from(e)
        except Exception as e:
            log.debug("unhandled exception in %s", fn.__name__, exc_info=True)
            bug = True
            results.fail(
                "Unhandled exception",
                code=StatusCode.E_BUG_UNHANDLED,
                details={"exception": repr(e)},
            )

        _render(results, output=output, quiet=quiet)
        exit_code = _exit_code_from_events(results, bug=bug)
        if return_results:
            return results, exit_code
        raise SystemExit(exit_code)

    return callback


def _build_params(
    params: list[inspect.Parameter], hints: dict[str, Any], *, positional: bool
) -> list[click.Parameter]:
    args: list[click.Parameter] = []
    opts: list[click.Parameter] = []
    for p in params:
        ann = hints.get(
            p.name,
            p.annotation if p.annotation is not inspect.Parameter.empty else str,
        )
        has_default = p.default is not inspect.Parameter.empty

        if ann is bool:
            opts.append(
                click.Option([_flag(p.name)], is_flag=True, default=bool(p.default) if has_default else False)
            )
        elif positional and not has_default:
            args.append(click.Argument([p.name], type=_param_type(ann)))
        else:
            opts.append(
                click.Option(
                    [_flag(p.name)],
                    type=_param_type(ann),
                    required=not has_default,
                    show_default=has_default,
                    **({"default": p.default} if has_default else {}),
                )
            )
    return args + opts


def build_cli(
    prog_name: str, *, registry: Registry = REGISTRY, return_results: bool = False
) -> click.Group:
    """Build a click group with one command per registered verb.

    With ``return_results`` each command returns ``(ResultObject, exit_code)``
    instead of exiting, for use with ``standalone_mode=False``.
    """

    @click.group(name=prog_name)
    @click.option(
        "--output",
        type=click.Choice(["text", "json"], case_sensitive=False),
        default="text",
        show_default=True,
    )
    @click.option("--quiet", is_flag=True, default=False)
    @click.option(
        "--log-level",
        type=click.Choice(LOG_LEVELS, case_sensitive=False),
        help="Level for the errpack loggers; unset leaves them alone.",
    )
    @click.pass_context
    def root(ctx: click.Context, output: str, quiet: bool, log_level: str | None) -> None:
        """Encode, decode and inspect packed 32-bit error codes."""
        if log_level is not None:
            logging.getLogger(PACKAGE_LOGGER).setLevel(log_level.upper())
        ctx.ensure_object(dict)
        ctx.obj["output"] = output.lower()
        ctx.obj["quiet"] = quiet

    for verb, fn in registry:
        meta = registry.meta[verb]
        params = list(inspect.signature(fn).parameters.values())
        _check_signature(verb, params)
        try:
            hints = get_type_hints(fn)
        except Exception:
            hints = {}

        cmd = click.Command(
            name=verb,
            callback=_make_callback(fn, return_results=return_results),
            help=meta.summary,
        )
        cmd.params.extend(_build_params(params[1:], hints, positional=meta.positional))
        root.add_command(cmd)

    return root
