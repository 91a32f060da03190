"""Which trackables the dashboard shows, and in what order."""

from typing import Optional

from ..store.models import DashboardSettings, Trackable


def resolve_display_order(
    trackables: list[Trackable], selected_ids: list[str], order_ids: list[str]
) -> list[Trackable]:
    """
    Filter trackables to the selected ids and sort them by the saved order.

    Ids missing from the order list go after every ordered one, keeping
    their original relative order.

    Example:
        selected = {A, C}, order = [C, B, A]  ->  [C, A]
    """
    selected = set(selected_ids)
    position = {trackable_id: index for index, trackable_id in enumerate(order_ids)}
    unordered = len(position)

    shown = [t for t in trackables if t.id in selected]
    # sorted() is stable, so unordered ids keep their collection order
    return sorted(shown, key=lambda t: position.get(t.id, unordered))


def display_trackables(
    trackables: list[Trackable], settings: Optional[DashboardSettings]
) -> list[Trackable]:
    """Display list for an owner; all trackables in creation order when unset."""
    if settings is None:
        return list(trackables)
    return resolve_display_order(
        trackables, settings.selected_trackables, settings.trackable_order
    )


def default_selection(trackable_ids: list[str]) -> tuple[list[str], list[str]]:
    """Selection and order used on reset: everything, in creation order."""
    return list(trackable_ids), list(trackable_ids)


def toggle_selection(
    selected: list[str], order: list[str], trackable_id: str, checked: bool
) -> tuple[list[str], list[str]]:
    """
    Check or uncheck a trackable.

    Checking appends it to the order when it has none yet; unchecking keeps
    its place in the order so re-checking restores it.
    """
    selected = list(selected)
    order = list(order)

    if checked:
        if trackable_id not in selected:
            selected.append(trackable_id)
        if trackable_id not in order:
            order.append(trackable_id)
    else:
        selected = [i for i in selected if i != trackable_id]

    return selected, order


def move_before(order: list[str], dragged_id: str, target_id: str) -> list[str]:
    """
    Drop `dragged_id` onto `target_id`.

    The dragged id is taken out and reinserted at the target's former index,
    so dragging down lands after the target and dragging up lands before it.
    """
    if dragged_id == target_id or dragged_id not in order or target_id not in order:
        return list(order)

    order = list(order)
    target_index = order.index(target_id)
    order.remove(dragged_id)
    order.insert(target_index, dragged_id)
    return order


def prune_selection(
    settings: DashboardSettings, trackable_id: str
) -> tuple[list[str], list[str]]:
    """Drop a deleted trackable from both lists."""
    selected = [i for i in settings.selected_trackables if i != trackable_id]
    order = [i for i in settings.trackable_order if i != trackable_id]
    return selected, order
