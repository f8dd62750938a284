"""Output file names from a printf-style template such as "out-%03d.zip"."""

from __future__ import annotations

from .errors import InvalidTemplateError


class Namer:
    """
    Hands out one new name per call, numbering from 1.

    The template is checked when the Namer is built: it must format with a
    single integer, and 0 and 1 must give different results. The counter is
    never reset.
    """

    def __init__(self, template: str):
        try:
            a = template % 0
            b = template % 1
        except (TypeError, ValueError, KeyError) as exc:
            raise InvalidTemplateError(f"Invalid template {template!r}: {exc}") from exc
        if a == b:
            raise InvalidTemplateError(
                f"Invalid template {template!r}: output name does not change with the part number"
            )
        self.template = template
        self._n = 1

    def next(self) -> str:
        name = self.template % self._n
        self._n += 1
        return name

    __call__ = next

    def __iter__(self):
        return self

    def __next__(self) -> str:
        return self.next()
