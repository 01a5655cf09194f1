"""
Partitioning of the inlay length into proportioned sections.

Sections are immutable; every operation returns a new tuple whose shares
sum to 100. Callers (the edit boundary) swap the new tuple in.
"""

import logging
from dataclasses import replace
from typing import Optional, Sequence, Tuple

from inlay_generator.contracts import BaseSection, SectionExtent
from inlay_generator.errors import InvalidDimension, InvalidState

logger = logging.getLogger(__name__)

TOTAL_SHARE = 100.0
SHARE_TOLERANCE = 1e-6

Sections = Tuple[BaseSection, ...]


def total_share(sections: Sequence[BaseSection]) -> float:
    return sum(s.share for s in sections)


def check_shares(sections: Sequence[BaseSection]) -> None:
    """Raise InvalidState unless the list is non-empty and sums to 100."""
    if not sections:
        raise InvalidState("at least one section is required")
    total = total_share(sections)
    if abs(total - TOTAL_SHARE) > SHARE_TOLERANCE:
        raise InvalidState(f"section shares sum to {total}, expected 100")


def redistribute(
    sections: Sequence[BaseSection], fixed_index: Optional[int] = None
) -> Sections:
    """Rescale shares so they sum to 100.

    With ``fixed_index`` the share at that index is clamped to [0, 100]
    and held; the others are scaled to fill the remainder while keeping
    their proportions to one another. Without it every share is scaled.
    An all-zero group receives the remainder evenly.
    """
    if not sections:
        raise InvalidState("cannot redistribute an empty section list")
    items = list(sections)
    if fixed_index is not None:
        _check_index(items, fixed_index)
        if len(items) == 1:
            return (replace(items[0], share=TOTAL_SHARE),)
        fixed = _clamp(items[fixed_index].share)
        items[fixed_index] = replace(items[fixed_index], share=fixed)
        others = [i for i in range(len(items)) if i != fixed_index]
        remainder = TOTAL_SHARE - fixed
    else:
        others = list(range(len(items)))
        remainder = TOTAL_SHARE

    old_sum = sum(max(items[i].share, 0.0) for i in others)
    for i in others:
        if old_sum > 0:
            share = max(items[i].share, 0.0) * remainder / old_sum
        else:
            share = remainder / len(others)
        items[i] = replace(items[i], share=share)

    result = tuple(items)
    check_shares(result)
    return result


def set_share(sections: Sequence[BaseSection], index: int, share: float) -> Sections:
    """Set one section's share and rebalance the rest around it."""
    _check_index(sections, index)
    items = list(sections)
    items[index] = replace(items[index], share=_clamp(share))
    return redistribute(items, fixed_index=index)


def insert_after(
    sections: Sequence[BaseSection],
    index: int,
    template: Optional[BaseSection] = None,
) -> Sections:
    """Insert a default-footprint section after ``index``.

    The new section starts with the reference section's share, then all
    shares are rescaled back to 100.
    """
    _check_index(sections, index)
    base = template if template is not None else BaseSection()
    new = replace(base, share=sections[index].share)
    items = list(sections)
    items.insert(index + 1, new)
    logger.debug("Inserted section at %d (share %.3f)", index + 1, new.share)
    return redistribute(items)


def remove(sections: Sequence[BaseSection], index: int) -> Sections:
    """Delete a section and rescale the remaining shares to 100."""
    _check_index(sections, index)
    if len(sections) == 1:
        raise InvalidState("cannot remove the last remaining section")
    items = list(sections)
    del items[index]
    return redistribute(items)


def compute_extents(
    sections: Sequence[BaseSection], total_length: float
) -> Tuple[SectionExtent, ...]:
    """Offset and length of each section along the partitioned axis."""
    if total_length <= 0:
        raise InvalidDimension(f"partitioned length must be positive, got {total_length}")
    check_shares(sections)
    extents = []
    offset = 0.0
    for section in sections:
        extent = section.share / TOTAL_SHARE * total_length
        extents.append(SectionExtent(offset=offset, extent=extent))
        offset += extent
    return tuple(extents)


def _clamp(share: float) -> float:
    return min(max(float(share), 0.0), TOTAL_SHARE)


def _check_index(sections: Sequence[BaseSection], index: int) -> None:
    if not 0 <= index < len(sections):
        raise IndexError(f"section index {index} out of range for {len(sections)} sections")
