"""Turn a free-form terminal response into pipeline indices.

Accepted forms (``N`` is the number of pipelines listed):

- ``yes``: every pipeline, ``1..N``
- ``no``: cancel, nothing selected
- ``reject``: every pipeline, with a rejection (approve only)
- ``3``: a single pipeline
- ``2-4``: a contiguous range
- ``1,3,5`` or ``1, 3, 5``: an explicit list, order and duplicates kept

Examples:
    >>> parse_selection("2-4", 5).indices
    (2, 3, 4)
    >>> parse_selection("yes", 3).indices
    (1, 2, 3)
    >>> parse_selection("no", 3).is_cancel
    True
"""

from __future__ import annotations

import logging
import re

from cph.exceptions import InvalidRangeError, OutOfRangeError, UnrecognizedInputError
from cph.models import ApprovalDecision, Selection, SelectionKind

__all__ = ["parse_selection"]

log = logging.getLogger(__name__)

_SINGLE_PATTERN = re.compile(r"^[+-]?\d+$")
_RANGE_PATTERN = re.compile(r"^(\d{1,2})-(\d{1,2})$")
_LIST_PATTERN = re.compile(r"^\d+(?:\s*,\s*\d+)*$")


def _check_bounds(raw: str, index: int, count: int) -> None:
    if index < 1 or index > count:
        raise OutOfRangeError(raw, index, count)


def _parse_range(raw: str, match: re.Match[str], count: int) -> Selection:
    """Resolve ``A-B`` to ``(A, A+1, ..., B)``.

    Raises:
        InvalidRangeError: If ``A >= B`` or the range is wider than ``count``.
        OutOfRangeError: If an endpoint lies outside ``[1, count]``.
    """
    start, end = int(match.group(1)), int(match.group(2))
    if start >= end:
        raise InvalidRangeError(raw, start, end, "start must be lower than end")
    if end - start > count:
        raise InvalidRangeError(raw, start, end, "range is larger than number of pipelines retrieved")
    _check_bounds(raw, start, count)
    _check_bounds(raw, end, count)
    return Selection(kind=SelectionKind.RANGE, indices=tuple(range(start, end + 1)))


def _parse_list(raw: str, text: str, count: int) -> Selection:
    """Resolve ``A,B,C`` to ``(A, B, C)`` as given.

    Only the numeric minimum and maximum are compared against the bounds.

    Raises:
        OutOfRangeError: If the smallest or largest value is outside ``[1, count]``.
    """
    values = tuple(int(part) for part in text.split(","))
    _check_bounds(raw, min(values), count)
    _check_bounds(raw, max(values), count)
    return Selection(kind=SelectionKind.LIST, indices=values)


def parse_selection(raw: str, count: int, *, allow_reject: bool = False) -> Selection:
    """Parse a user response against ``count`` listed pipelines.

    Args:
        raw: Line typed by the user.
        count: Number of pipelines in the displayed menu.
        allow_reject: Accept the ``reject`` keyword (approve flow).

    Returns:
        The resolved selection.

    Raises:
        UnrecognizedInputError: Input matches none of the accepted forms.
        InvalidRangeError: Range is reversed or too wide.
        OutOfRangeError: An index falls outside ``[1, count]``.
    """
    text = raw.strip()
    lowered = text.lower()
    log.debug("Parsing selection %r against %d pipeline(s)", text, count)

    everything = tuple(range(1, count + 1))
    if lowered == "yes":
        return Selection(kind=SelectionKind.ALL, indices=everything)
    if lowered == "no":
        return Selection(kind=SelectionKind.CANCEL)
    if lowered == "reject" and allow_reject:
        return Selection(kind=SelectionKind.REJECT, indices=everything, decision=ApprovalDecision.REJECTED)

    if _SINGLE_PATTERN.match(text):
        index = int(text)
        _check_bounds(raw, index, count)
        return Selection(kind=SelectionKind.SINGLE, indices=(index,))

    range_match = _RANGE_PATTERN.match(text)
    if range_match:
        return _parse_range(raw, range_match, count)

    if _LIST_PATTERN.match(text):
        return _parse_list(raw, text, count)

    raise UnrecognizedInputError(raw)
