"""
Order Sheet Backend: Order Service (Business Logic)
====================================================

What:  Turns id-addressed order operations into position-addressed store calls.
How:   Loads the table through WorkbookStore, scans it linearly for the id,
       merges partial updates onto a field-keyed record, then hands the
       record and a header-inclusive position back to the store.
Who:   Called by the /orders route handlers.

Position Translation:
    read_all() drops the header, so the index found by the scan counts
    data rows from 0. The store numbers rows with the header at 0, hence:

        store_position = data_row_index + 1

Error Mapping:
    list / get / delete   store faults propagate as StorageError   → 500
    create / update       any fault is wrapped in OrderWriteError  → 400
    unknown id            NotFoundError                            → 404
"""

import logging
import time
from datetime import datetime
from typing import Any, Dict, List

from ordersheet.exceptions import NotFoundError, OrderSheetError, OrderWriteError
from ordersheet.services.workbook_store import WorkbookStore, row_to_order

logger = logging.getLogger(__name__)


def generate_order_id() -> str:
    """Current wall-clock time in epoch milliseconds, as a decimal string."""
    return str(int(time.time() * 1000))


def find_row_index(rows: List[List[Any]], order_id: str) -> int:
    """Index of the first row whose id cell equals `order_id`, or -1."""
    for index, row in enumerate(rows):
        if row and row[0] == order_id:
            return index
    return -1


class OrderService:
    """
    CRUD over the order table.

    Holds a reference to the one WorkbookStore built at startup; keeps no
    other state between calls.
    """

    def __init__(self, store: WorkbookStore):
        self.store = store

    async def list_orders(self) -> List[List[Any]]:
        """All data rows in file order, header excluded."""
        orders = await self.store.read_all()
        logger.info("Fetched all orders.")
        return orders

    async def get_order(self, order_id: str) -> List[Any]:
        """
        Positional row of the first order whose id equals `order_id`.

        Raises:
            NotFoundError: no row carries this id
            StorageError: the workbook could not be read
        """
        rows = await self.store.read_all()
        index = find_row_index(rows, order_id)
        if index == -1:
            logger.warning("Order with ID %s not found.", order_id)
            raise NotFoundError(resource="Order", resource_id=order_id)
        logger.info("Fetched order with ID %s.", order_id)
        return rows[index]

    async def create_order(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        """
        Append a new order built from `fields` and return it.

        The generated id is laid down first, so an `id` in `fields` wins.
        dateOfCreation defaults to the current time when the client omits it.
        Ids are not checked for uniqueness.

        Raises:
            OrderWriteError: anything went wrong while appending
        """
        new_order: Dict[str, Any] = {"id": generate_order_id(), **fields}
        if new_order.get("dateOfCreation") is None:
            new_order["dateOfCreation"] = datetime.now().strftime(self.store.timestamp_format)

        try:
            await self.store.append(new_order)
        except Exception as e:
            logger.error("Error creating order: %s", str(e))
            raise OrderWriteError(
                message=_raw_message(e),
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("Created new order with ID %s.", new_order["id"])
        return new_order

    async def update_order(self, order_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """
        Shallow-merge `fields` over the stored order and rewrite its row.

        Raises:
            NotFoundError: no row carries this id (nothing is written)
            OrderWriteError: reading, merging or writing failed
        """
        try:
            rows = await self.store.read_all()
            index = find_row_index(rows, order_id)
            if index == -1:
                logger.warning("Order with ID %s not found for update.", order_id)
                raise NotFoundError(resource="Order", resource_id=order_id)

            updated_order = {**row_to_order(rows[index]), **fields}
            await self.store.replace_at(updated_order, index + 1)
        except NotFoundError:
            raise
        except Exception as e:
            logger.error("Error updating order: %s", str(e))
            raise OrderWriteError(
                message=_raw_message(e),
                context={"order_id": order_id, "error_type": type(e).__name__},
            ) from e

        logger.info("Updated order with ID %s.", order_id)
        return updated_order

    async def delete_order(self, order_id: str) -> Dict[str, bool]:
        """
        Remove the first row whose id equals `order_id`.

        Raises:
            NotFoundError: no row carries this id (nothing is written)
            StorageError: the workbook could not be read or written
        """
        rows = await self.store.read_all()
        index = find_row_index(rows, order_id)
        if index == -1:
            logger.warning("Order with ID %s not found for deletion.", order_id)
            raise NotFoundError(resource="Order", resource_id=order_id)

        await self.store.delete_at(index + 1)
        logger.info("Deleted order with ID %s.", order_id)
        return {"success": True}


def _raw_message(exc: Exception) -> str:
    if isinstance(exc, OrderSheetError):
        return exc.message
    return str(exc) or type(exc).__name__
