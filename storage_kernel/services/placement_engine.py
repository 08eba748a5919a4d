"""
PlacementEngine -- the kernel's public entry point.

Responsibility:
    Exposes store / unstore / transfer and location create / edit / query
    operations to the API layer.  Each call runs as one logical
    transaction: validate, resolve locations, apply changes, record audit
    rows, commit.  Any failure rolls the whole call back.

Architecture position:
    Kernel > Services -- the orchestration layer above StoreService,
    UnstoreService and LocationService.  Owns the transaction boundary
    through an injected transaction runner; every service below it only
    flushes.

Invariants enforced:
    - Mutating calls require a RequestContext and fail with
      MissingContextError before any database access.
    - No partial application is ever visible: the runner commits only
      after the whole operation succeeds.
    - Results are DTOs built inside the transaction; no ORM instance
      escapes to callers.
    - Every request gets a fresh LocationCache and fresh services; no
      state is shared between requests.

Failure modes:
    - Any StorageKernelError from validation propagates unchanged after
      rollback.
    - sqlalchemy IntegrityError at commit when a concurrent transaction
      took the same address or barcode first.  Not retried.

Audit relevance:
    Every item change produces exactly one StoreRecord committed in the
    same transaction as the change itself.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Mapping, Sequence
from functools import partial
from typing import Any, TypeVar
from uuid import uuid4

from sqlalchemy.orm import Session, sessionmaker

from storage_kernel.db.engine import run_in_transaction
from storage_kernel.domain.dtos import (
    ItemInfo,
    LocationIdentifier,
    LocationInfo,
    LocationInput,
    RequestContext,
    StoreInput,
    StoreRecordInfo,
    StoreResult,
    UnstoreResult,
)
from storage_kernel.domain.location_tree import qualified_label
from storage_kernel.domain.values import Address
from storage_kernel.exceptions import StorageKernelError
from storage_kernel.logging_config import LogContext, get_logger
from storage_kernel.models.item import Item
from storage_kernel.models.location import Location
from storage_kernel.selectors.item_selector import ItemSelector
from storage_kernel.selectors.location_selector import LocationSelector
from storage_kernel.selectors.store_record_selector import StoreRecordSelector
from storage_kernel.services.base import require_context
from storage_kernel.services.location_service import LocationService
from storage_kernel.services.store_service import StoreService
from storage_kernel.services.unstore_service import UnstoreService

logger = get_logger("services.placement_engine")

T = TypeVar("T")

TransactionRunner = Callable[[Callable[[Session], T]], T]


class PlacementEngine:
    """
    Transactional facade over the storage services.

    Contract:
        Every public method is one transaction.  Mutating methods take the
        caller's RequestContext first.

    Guarantees:
        - Returned ItemInfo / LocationInfo values reflect committed state.
        - A raised exception means nothing was committed.

    Non-goals:
        - Authentication, transport and query decoding belong to the API
          layer.
        - Conflicting concurrent commits are surfaced, not retried.
    """

    def __init__(
        self,
        transaction_runner: TransactionRunner | None = None,
        session_factory: sessionmaker[Session] | None = None,
    ):
        """
        Args:
            transaction_runner: Runs a unit of work in one transaction.
                Defaults to ``db.engine.run_in_transaction``.
            session_factory: Session factory for the default runner.
                Defaults to the engine module's factory.
        """
        self._run: TransactionRunner = transaction_runner or partial(
            run_in_transaction, session_factory=session_factory
        )

    # ------------------------------------------------------------------
    # Store
    # ------------------------------------------------------------------

    def store_barcode(
        self,
        context: RequestContext,
        barcode: str,
        location: LocationIdentifier,
        address: Address | None = None,
    ) -> ItemInfo:
        def work(session: Session) -> ItemInfo:
            item = StoreService(session).store_barcode(context, barcode, location, address)
            return _item_infos(session, [item])[0]

        return self._execute("store_barcode", context, work)

    def store_barcodes(
        self,
        context: RequestContext,
        barcodes: Iterable[str],
        location: LocationIdentifier,
    ) -> StoreResult:
        barcodes = list(barcodes)

        def work(session: Session) -> StoreResult:
            items = StoreService(session).store_barcodes(context, barcodes, location)
            return StoreResult(_item_infos(session, items))

        return self._execute("store_barcodes", context, work)

    def store(
        self,
        context: RequestContext,
        inputs: Sequence[StoreInput],
        default_location: LocationIdentifier | None = None,
    ) -> StoreResult:
        def work(session: Session) -> StoreResult:
            items = StoreService(session).store(context, inputs, default_location)
            return StoreResult(_item_infos(session, items))

        return self._execute("store", context, work)

    def transfer(
        self,
        context: RequestContext,
        source: LocationIdentifier,
        destination: LocationIdentifier,
    ) -> StoreResult:
        def work(session: Session) -> StoreResult:
            items = StoreService(session).transfer(context, source, destination)
            return StoreResult(_item_infos(session, items))

        return self._execute("transfer", context, work)

    # ------------------------------------------------------------------
    # Unstore
    # ------------------------------------------------------------------

    def unstore_barcode(self, context: RequestContext, barcode: str) -> ItemInfo | None:
        def work(session: Session) -> ItemInfo | None:
            item = UnstoreService(session).unstore_barcode(context, barcode)
            return _item_infos(session, [item])[0] if item is not None else None

        return self._execute("unstore_barcode", context, work)

    def unstore_barcodes(self, context: RequestContext, barcodes: Iterable[str]) -> UnstoreResult:
        barcodes = list(barcodes)

        def work(session: Session) -> UnstoreResult:
            items = UnstoreService(session).unstore_barcodes(context, barcodes)
            return UnstoreResult(_item_infos(session, items))

        return self._execute("unstore_barcodes", context, work)

    def empty(self, context: RequestContext, location: LocationIdentifier) -> UnstoreResult:
        def work(session: Session) -> UnstoreResult:
            items = UnstoreService(session).empty(context, location)
            return UnstoreResult(_item_infos(session, items))

        return self._execute("empty", context, work)

    # ------------------------------------------------------------------
    # Locations
    # ------------------------------------------------------------------

    def create_location(self, context: RequestContext, data: LocationInput) -> LocationInfo:
        def work(session: Session) -> LocationInfo:
            location = LocationService(session).create_location(context, data)
            return _location_info(session, location)

        return self._execute("create_location", context, work)

    def edit_location(
        self,
        context: RequestContext,
        location: LocationIdentifier,
        fields: Mapping[str, Any],
    ) -> LocationInfo:
        def work(session: Session) -> LocationInfo:
            edited = LocationService(session).edit_location(context, location, fields)
            return _location_info(session, edited)

        return self._execute("edit_location", context, work)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_location(self, location: LocationIdentifier) -> LocationInfo:
        def work(session: Session) -> LocationInfo:
            return _location_info(session, LocationSelector(session).get(location))

        return self._execute("get_location", None, work, mutating=False)

    def get_stored(self, barcodes: Iterable[str]) -> tuple[ItemInfo, ...]:
        barcodes = list(barcodes)

        def work(session: Session) -> tuple[ItemInfo, ...]:
            return _item_infos(session, ItemSelector(session).find_by_barcodes(barcodes))

        return self._execute("get_stored", None, work, mutating=False)

    def history(self, barcode: str) -> list[StoreRecordInfo]:
        def work(session: Session) -> list[StoreRecordInfo]:
            return StoreRecordSelector(session).history_for_barcode(barcode)

        return self._execute("history", None, work, mutating=False)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _execute(
        self,
        operation: str,
        context: RequestContext | None,
        work: Callable[[Session], T],
        *,
        mutating: bool = True,
    ) -> T:
        if mutating:
            require_context(context, operation)
        with LogContext.bind(
            correlation_id=str(uuid4()),
            username=context.username if context else None,
            app=context.app if context else None,
            operation=operation,
        ):
            logger.debug("operation_started")
            t0 = time.monotonic()
            try:
                result = self._run(work)
            except StorageKernelError as exc:
                logger.info(
                    "operation_rejected",
                    extra={"error_code": exc.code, "error_message": str(exc)},
                )
                raise
            duration_ms = round((time.monotonic() - t0) * 1000, 2)
            logger.info("operation_completed", extra={"duration_ms": duration_ms})
            return result


def _item_infos(session: Session, items: Sequence[Item]) -> tuple[ItemInfo, ...]:
    locations: dict[int, Location | None] = {}
    infos = []
    for item in items:
        if item.location_id not in locations:
            locations[item.location_id] = session.get(Location, item.location_id)
        infos.append(ItemInfo.from_model(item, locations[item.location_id]))
    return tuple(infos)


def _location_info(session: Session, location: Location) -> LocationInfo:
    selector = LocationSelector(session)
    return LocationInfo.from_model(
        location,
        qualified_label=qualified_label(location, selector),
        child_ids=tuple(child.id for child in selector.children_of(location)),
        stored_barcodes=tuple(
            item.barcode for item in ItemSelector(session).stored_in(location.id)
        ),
    )
