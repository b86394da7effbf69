"""Split image groups into size-bounded batches, one batch per sheet."""

from __future__ import annotations

from dataclasses import dataclass, field

from spritely.model.image import ImageGroup


@dataclass
class Partition:
    batches: list[list[ImageGroup]] = field(default_factory=list)
    placed: list[ImageGroup] = field(default_factory=list)  # already drawn, not re-packed


def is_placed(group: ImageGroup) -> bool:
    """True when the group's image was drawn earlier with enough room for this group."""
    info = group.info
    if info is None or info.placement is None:
        return False
    return info.placement.width >= group.width and info.placement.height >= group.height


def partition(groups: list[ImageGroup], budget: int = 0) -> Partition:
    """Batch *groups* so each batch's encoded size stays within *budget* bytes.

    Greedy fill over the groups sorted largest first: a group that would
    push the running total past the budget closes the batch and opens the
    next one. A group larger than the budget on its own still gets a batch.
    ``budget == 0`` means one batch for everything.
    """
    result = Partition()
    pending: list[ImageGroup] = []
    for group in groups:
        if is_placed(group):
            result.placed.append(group)
        else:
            pending.append(group)

    if not pending:
        return result
    if not budget:
        result.batches.append(pending)
        return result

    batch: list[ImageGroup] = []
    total = 0
    for group in sorted(pending, key=lambda g: g.size, reverse=True):
        total += group.size
        if total > budget and batch:
            result.batches.append(batch)
            batch = []
            total = group.size
        batch.append(group)
    result.batches.append(batch)
    return result
