from dataclasses import dataclass, field
from typing import Any, Callable

Handler = Callable[..., Any]


@dataclass(frozen=True)
class CommandMeta:
    verb: str
    summary: str
    module: str
    positional: bool


class RegistrationError(RuntimeError):
    pass


@dataclass
class Registry:
    """Verb name to handler mapping filled in by the ``@command`` decorator."""

    handlers: dict[str, Handler] = field(default_factory=dict)
    meta: dict[str, CommandMeta] = field(default_factory=dict)

    def register(self, fn: Handler, *, verb: str, summary: str, positional: bool) -> None:
        if verb in self.handlers:
            prev = self.meta[verb]
            raise RegistrationError(
                f"Duplicate verb '{verb}' registered by {fn.__module__}; "
                f"already registered by {prev.module}"
            )
        self.handlers[verb] = fn
        self.meta[verb] = CommandMeta(
            verb=verb, summary=summary, module=fn.__module__, positional=positional
        )

    def command(
        self,
        verb: str | None = None,
        *,
        summary: str | None = None,
        positional: bool = True,
    ):
        """Decorator registering a handler ``fn(results, *, ...)`` as a verb.

        Args:
            verb: Verb name (defaults to the function name, ``_`` as ``-``).
            summary: One-line help text (defaults to the first docstring line).
            positional: Expose required keyword-only parameters as positional
                arguments. Optional parameters are always options.
        """

        def decorate(fn: Handler) -> Handler:
            doc = (fn.__doc__ or "").strip()
            self.register(
                fn,
                verb=verb or fn.__name__.replace("_", "-"),
                summary=summary or (doc.splitlines()[0].strip() if doc else "Run command"),
                positional=positional,
            )
            return fn

        return decorate

    def __iter__(self):
        return iter(sorted(self.handlers.items()))


REGISTRY = Registry()
command = REGISTRY.command
