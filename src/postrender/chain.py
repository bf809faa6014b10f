"""Ordered, timed execution of page transforms.

A transform is any callable ``run(document, options) -> None`` that mutates a
parsed page in place. Transforms are listed once at startup as
`TransformStep` records. The list order is the execution order; steps that
inspect what another step produced declare it in ``after`` and the chain
refuses to start when that edge is violated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .constants import BASE_URL
from .document import parse
from .formatting import format_html
from .serialize import serialize
from .timing import TransformTimers

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from .document import Document

    Mutate = Callable[[Document, Any], None]


class TransformOrderError(ValueError):
    """Raised when a transform list breaks a declared ordering edge."""


@dataclass(frozen=True, slots=True)
class TransformStep:
    """One named transform and its options.

    ``page_options`` builds the options from the current page URL instead, for
    transforms that need routing context.
    """

    name: str
    run: Mutate
    options: Any = None
    after: tuple[str, ...] = ()
    page_options: Callable[[str], Any] | None = None

    def options_for(self, page_url: str) -> Any:
        if self.page_options is not None:
            return self.page_options(page_url)
        return self.options


def validate_order(steps: Sequence[TransformStep]) -> None:
    known = {step.name for step in steps}
    seen: set[str] = set()
    for step in steps:
        if step.name in seen:
            raise TransformOrderError(f"Duplicate transform name '{step.name}'")
        for dependency in step.after:
            if dependency not in known:
                raise TransformOrderError(f"Transform '{step.name}' runs after unknown transform '{dependency}'")
            if dependency not in seen:
                raise TransformOrderError(f"Transform '{step.name}' must run after '{dependency}'")
        seen.add(step.name)


class TransformChain:
    __slots__ = ("base_url", "formatter", "formatter_name", "steps", "timers")

    def __init__(
        self,
        steps: Iterable[TransformStep],
        *,
        timers: TransformTimers | None = None,
        formatter: Callable[[str], str] | None = format_html,
        formatter_name: str = "format",
        base_url: str = BASE_URL,
    ) -> None:
        self.steps = tuple(steps)
        validate_order(self.steps)
        self.timers = timers if timers is not None else TransformTimers()
        self.formatter = formatter
        self.formatter_name = formatter_name
        self.base_url = base_url

        for step in self.steps:
            self.timers.register(step.name)
        if formatter is not None:
            self.timers.register(formatter_name)

    @property
    def names(self) -> list[str]:
        return [step.name for step in self.steps]

    def apply(self, document: Document, *, page_url: str = "/") -> None:
        """Run every step over `document`, in order, charging each to the timers."""
        for step in self.steps:
            options = step.options_for(page_url)
            self.timers.time(step.name, lambda step=step, options=options: step.run(document, options))

    def run(self, html: str, *, page_url: str = "/") -> str:
        """Transform one rendered page and return its final markup.

        Errors from parsing, any step or the formatter propagate unchanged.
        """
        return self.render(parse(html, base_url=self.base_url), page_url=page_url)

    def render(self, document: Document, *, page_url: str = "/") -> str:
        """Transform an already parsed page and return its final markup."""
        self.apply(document, page_url=page_url)
        content = serialize(document)

        if self.formatter is None:
            return content

        formatter = self.formatter
        formatted = content

        def _format() -> None:
            nonlocal formatted
            formatted = formatter(content)

        self.timers.time(self.formatter_name, _format)
        return formatted
