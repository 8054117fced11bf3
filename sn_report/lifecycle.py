import logging
from typing import Iterable

from .errors import InvalidStatusTransition
from .schemas import InventoryItem, SellthruResult, SellthruUpdate, SNStatus

logger = logging.getLogger(__name__)

# Ready is the only state that can move; sold states are final.
ALLOWED_TRANSITIONS = {
    SNStatus.READY: {SNStatus.SUCCESS_SOLD, SNStatus.FAILED_SOLD},
    SNStatus.SUCCESS_SOLD: set(),
    SNStatus.FAILED_SOLD: set(),
}


def can_transition(current: SNStatus, target: SNStatus) -> bool:
    return current == target or target in ALLOWED_TRANSITIONS[current]


def change_status(item: InventoryItem, target: SNStatus) -> InventoryItem:
    """Manual status action. Re-applying the current status is a no-op."""
    target = SNStatus(target)
    if not can_transition(item.status, target):
        raise InvalidStatusTransition(item.sn_number, item.status.value, target.value)
    item.status = target
    return item


def apply_sellthru_update(item: InventoryItem, update: SellthruUpdate) -> bool:
    """
    Marks `item` sold with the outlet and price from `update`.
    Applying the same update again leaves the item unchanged (last write wins).
    Returns False for an item already marked failed.
    """
    if not can_transition(item.status, SNStatus.SUCCESS_SOLD):
        return False
    item.status = SNStatus.SUCCESS_SOLD
    item.id_digipos = update.id_digipos
    item.nama_outlet = update.nama_outlet
    item.price = update.price
    item.transaction_id = update.transaction_id
    return True


def apply_sellthru(items: Iterable[InventoryItem], updates: Iterable[SellthruUpdate]) -> SellthruResult:
    """Applies each update to every item sharing its serial number."""
    by_sn: dict[str, list[InventoryItem]] = {}
    for item in items:
        by_sn.setdefault(item.sn_number, []).append(item)

    result = SellthruResult()
    for update in updates:
        matches = by_sn.get(update.sn_number, [])
        applied = [apply_sellthru_update(item, update) for item in matches]
        if any(applied):
            result.success += 1
        else:
            result.failed += 1

    logger.info(f"Sellthru applied: {result.success} updated, {result.failed} not found or not eligible.")
    return result
