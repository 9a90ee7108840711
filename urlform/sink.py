"""
An append-only accumulator for application/x-www-form-urlencoded text.
"""

import urllib.parse
from typing import List, Optional

from .errors import SinkFinishedError


def byte_serialize(text: str) -> str:
    """
    Percent-encode text the way HTML forms do: UTF-8 bytes, alphanumerics
    and ``*-._`` unchanged, space as ``+``, anything else as ``%XX``.
    """
    # quote() always leaves "~" alone, forms do not
    return urllib.parse.quote_plus(text, safe="*").replace("~", "%7E")


class FormSink:
    """
    Collects escaped ``key=value`` pairs, joined with ``&``.

    ``target`` is existing text to append to. A separator is only written
    once the text is longer than ``start_position``, which defaults to the
    length of ``target``, so appending to a prefix such as ``"/path?"``
    does not produce a leading ``&``.
    """

    def __init__(self, target: str = "", start_position: Optional[int] = None):
        if start_position is None:
            start_position = len(target)
        if start_position > len(target):
            raise ValueError(
                f"start position {start_position} is past the end of the "
                f"target ({len(target)} chars)"
            )
        self._parts: List[str] = [target] if target else []
        self._length = len(target)
        self._start_position = start_position
        self._finished = False
        self.pair_count = 0

    def append_pair(self, key: str, value: str) -> "FormSink":
        if self._finished:
            raise SinkFinishedError()
        pair = byte_serialize(key) + "=" + byte_serialize(value)
        if self._length > self._start_position:
            pair = "&" + pair
        self._parts.append(pair)
        self._length += len(pair)
        self.pair_count += 1
        return self

    def finish(self) -> str:
        if self._finished:
            raise SinkFinishedError()
        self._finished = True
        return "".join(self._parts)
