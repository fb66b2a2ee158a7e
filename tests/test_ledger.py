from __future__ import annotations

import asyncio
from datetime import date

import pytest

from conftest import COCA_COLA, FakeCatalog, count_products, load_entry, load_product
from foodinventory.core.catalog import CatalogProduct
from foodinventory.core.errors import CatalogError, EntryNotFound
from foodinventory.services.ledger import InventoryLedger
from foodinventory.services.resolver import ProductResolver


def _ledger(session_maker, catalog, fetch_timeout: float = 0.5) -> InventoryLedger:
    resolver = ProductResolver(session_maker, catalog, fetch_timeout=fetch_timeout)
    return InventoryLedger(session_maker, resolver, default_low_stock_threshold=2)


def test_add_known_product_creates_entry(session_maker, ledger) -> None:
    entry, created = asyncio.run(ledger.add(COCA_COLA.barcode))

    assert created is True
    assert entry.quantity == 1
    assert entry.product.barcode == COCA_COLA.barcode
    assert entry.product.name == "Coca-Cola 330ml"
    assert entry.product.resolved is True
    assert entry.low_stock_threshold == 1


def test_add_with_slow_catalog_tracks_stub(session_maker) -> None:
    slow = FakeCatalog({"00000000": CatalogProduct(barcode="00000000", name="Late")}, delay=1.0)
    ledger = _ledger(session_maker, slow, fetch_timeout=0.05)

    entry, created = asyncio.run(ledger.add("00000000"))

    assert created is True
    assert entry.quantity == 1
    assert entry.product.resolved is False
    assert entry.product.name == "00000000"


def test_add_unknown_barcode_tracks_stub(session_maker, ledger) -> None:
    entry, created = asyncio.run(ledger.add("4006381333931"))

    assert created is True
    assert entry.product.resolved is False
    assert entry.product.name == "4006381333931"


def test_second_add_increments_and_keeps_expiry(session_maker, ledger) -> None:
    first_expiry = date(2026, 11, 1)
    asyncio.run(ledger.add(COCA_COLA.barcode, first_expiry))

    entry, created = asyncio.run(ledger.add(COCA_COLA.barcode, date(2027, 1, 1)))

    assert created is False
    assert entry.quantity == 2
    assert entry.expiry_date == first_expiry


def test_default_threshold_applies_to_new_entries(session_maker, catalog) -> None:
    ledger = _ledger(session_maker, catalog)

    entry, _ = asyncio.run(ledger.add(COCA_COLA.barcode))

    assert entry.low_stock_threshold == 2


def test_catalog_failure_adds_nothing(session_maker) -> None:
    ledger = _ledger(session_maker, FakeCatalog(error=CatalogError("Catalog returned HTTP 500")))

    with pytest.raises(CatalogError):
        asyncio.run(ledger.add(COCA_COLA.barcode))

    assert asyncio.run(load_entry(session_maker, COCA_COLA.barcode)) is None
    assert asyncio.run(count_products(session_maker)) == 0


def test_remove_last_unit_deletes_entry(session_maker, ledger) -> None:
    asyncio.run(ledger.add(COCA_COLA.barcode))

    assert asyncio.run(ledger.remove(COCA_COLA.barcode)) is None
    assert asyncio.run(load_entry(session_maker, COCA_COLA.barcode)) is None
    with pytest.raises(EntryNotFound):
        asyncio.run(ledger.remove(COCA_COLA.barcode))


def test_remove_decrements(session_maker, ledger) -> None:
    asyncio.run(ledger.add(COCA_COLA.barcode))
    asyncio.run(ledger.add(COCA_COLA.barcode))

    entry = asyncio.run(ledger.remove(COCA_COLA.barcode))

    assert entry is not None
    assert entry.quantity == 1
    assert entry.product.name == "Coca-Cola 330ml"


def test_remove_never_added(session_maker, ledger) -> None:
    with pytest.raises(EntryNotFound) as excinfo:
        asyncio.run(ledger.remove("12345670"))

    assert excinfo.value.barcode == "12345670"
    assert asyncio.run(load_entry(session_maker, "12345670")) is None
    assert asyncio.run(load_product(session_maker, "12345670")) is None


@pytest.mark.parametrize("barcode", ["5000112637922", "96385074"])
def test_adds_and_removes_balance(session_maker, ledger, barcode) -> None:
    async def scenario():
        for _ in range(3):
            await ledger.add(barcode)
        quantities = []
        for _ in range(3):
            entry = await ledger.remove(barcode)
            quantities.append(entry.quantity if entry else 0)
        return quantities

    assert asyncio.run(scenario()) == [2, 1, 0]
    assert asyncio.run(load_entry(session_maker, barcode)) is None
    with pytest.raises(EntryNotFound):
        asyncio.run(ledger.remove(barcode))


def test_list_orders_by_product_name(session_maker) -> None:
    catalog = FakeCatalog({
        "11111111": CatalogProduct(barcode="11111111", name="Yogurt"),
        "22222222": CatalogProduct(barcode="22222222", name="Apples"),
        "33333333": CatalogProduct(barcode="33333333", name="Milk"),
    })
    ledger = _ledger(session_maker, catalog)

    async def scenario():
        for barcode in ("11111111", "22222222", "33333333"):
            await ledger.add(barcode)
        return await ledger.list()

    entries = asyncio.run(scenario())

    assert [e.product.name for e in entries] == ["Apples", "Milk", "Yogurt"]


def test_list_empty(ledger) -> None:
    assert asyncio.run(ledger.list()) == []
