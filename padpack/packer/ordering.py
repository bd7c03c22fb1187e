"""Order in which components are taken from the queue."""

from __future__ import annotations

from typing import Optional, Sequence

from padpack.models import InputComponent, PackOrderStrategy


def sort_component_queue(
    components: Sequence[InputComponent],
    pack_order_strategy: PackOrderStrategy = PackOrderStrategy.LARGEST_TO_SMALLEST,
    pack_first: Optional[Sequence[str]] = None,
) -> list[InputComponent]:
    """Sort the packing queue.

    Components named in ``pack_first`` lead, in the order given there.
    The rest follow by pad count (descending for largest_to_smallest,
    ascending otherwise); ties keep their input order.
    """
    priority = {cid: i for i, cid in enumerate(pack_first or [])}
    largest_first = PackOrderStrategy(pack_order_strategy) is PackOrderStrategy.LARGEST_TO_SMALLEST

    def key(comp: InputComponent) -> tuple[int, int]:
        if comp.component_id in priority:
            return (0, priority[comp.component_id])
        count = len(comp.pads)
        return (1, -count if largest_first else count)

    return sorted(components, key=key)
