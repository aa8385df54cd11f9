from decimal import Decimal

import pytest

from jewelry_pos.constants import SCHEMA_VERSION
from jewelry_pos.database import get_connection
from jewelry_pos.database.repositories.customers_repo import CustomersRepo
from jewelry_pos.database.repositories.customers_repo import DomainError as CustomersDomainError
from jewelry_pos.database.repositories.metal_rates_repo import DomainError as RatesDomainError
from jewelry_pos.database.repositories.metal_rates_repo import MetalRatesRepo
from jewelry_pos.database.repositories.orders_repo import DomainError as OrdersDomainError
from jewelry_pos.database.repositories.orders_repo import OrderHeader, OrderItem, OrdersRepo
from jewelry_pos.database.repositories.products_repo import DomainError, ProductsRepo
from jewelry_pos.database.versioning import get_current_version


# ---------------- connection / seed ----------------

def test_fresh_db_is_seeded_with_rate_ladders(conn):
    repo = MetalRatesRepo(conn)
    rates = repo.list_rates()
    assert len(rates) == 9
    assert repo.get_rate("Gold", "24K").price_per_gram == Decimal("6080")
    assert repo.get_rate("gold", "22k").price_per_gram == Decimal("5573.33")
    assert get_current_version(conn) == SCHEMA_VERSION


def test_reopening_does_not_reseed(conn, db_path):
    again = get_connection(db_path)
    try:
        n = again.execute("SELECT COUNT(*) FROM metal_rates").fetchone()[0]
    finally:
        again.close()
    assert n == 9


# ---------------- metal rates ----------------

def test_upsert_matches_case_insensitively(conn):
    repo = MetalRatesRepo(conn)
    repo.upsert_rate("gold", "22k", Decimal("5600"))
    assert len(repo.list_rates()) == 9
    assert repo.get_rate("Gold", "22K").price_per_gram == Decimal("5600")


def test_upsert_inserts_new_material(conn):
    repo = MetalRatesRepo(conn)
    repo.upsert_rate("Platinum", "950", Decimal("3200"))
    assert repo.snapshot().lookup("950", "Platinum").rate == Decimal("3200")


@pytest.mark.parametrize("name, mtype, price", [("", "22K", 1), ("Gold", " ", 1), ("Gold", "22K", -1)])
def test_upsert_rejects_bad_rows(conn, name, mtype, price):
    with pytest.raises(RatesDomainError):
        MetalRatesRepo(conn).upsert_rate(name, mtype, price)


def test_update_gold_rates_rewrites_ladder(conn):
    repo = MetalRatesRepo(conn)
    repo.update_gold_rates(Decimal("6000"))
    table = repo.snapshot()
    assert table.lookup("22K", "Gold").rate == Decimal("5500")
    assert table.lookup("18K", "Gold").rate == Decimal("4500")
    assert table.lookup("10K", "Gold").rate == Decimal("2500")
    with pytest.raises(RatesDomainError):
        repo.update_gold_rates(0)


def test_update_silver_rates(conn):
    repo = MetalRatesRepo(conn)
    repo.update_silver_rates(Decimal("90"))
    assert repo.get_rate("Silver", "925").price_per_gram == Decimal("83.33")
    assert repo.get_rate("Silver", "999").price_per_gram == Decimal("90")


def test_deactivated_rate_left_out_of_snapshot(conn):
    repo = MetalRatesRepo(conn)
    rid = int(repo.get_rate("Gold", "14K").material_id)
    repo.deactivate(rid)
    assert len(repo.snapshot()) == 8
    assert len(repo.list_rates(active_only=False)) == 9


def test_snapshot_uses_settings_default(conn, settings):
    table = MetalRatesRepo(conn).snapshot(settings)
    assert table.default_gold_rate == settings.default_gold_rate


# ---------------- products ----------------

def make_ring(conn, **kw):
    args = dict(
        material_name="Gold",
        material_type="22K",
        weight_grams=Decimal("10"),
        making_rate_per_gram=Decimal("100"),
        stock_quantity=2,
    )
    args.update(kw)
    return ProductsRepo(conn).create("RNG-001", "Plain Band", **args)


def test_create_and_get_product(conn):
    make_ring(conn, less_weight=Decimal("0.5"))
    p = ProductsRepo(conn).get("RNG-001")
    assert p.name == "Plain Band"
    assert p.weight_grams == Decimal("10")
    assert p.less_weight == Decimal("0.5")
    assert p.stock_quantity == 2
    assert not p.has_stones
    assert [x.product_id for x in ProductsRepo(conn).list_products()] == ["RNG-001"]


def test_duplicate_and_invalid_products(conn):
    make_ring(conn)
    repo = ProductsRepo(conn)
    with pytest.raises(DomainError):
        repo.create("RNG-001", "Again")
    with pytest.raises(DomainError):
        repo.create("", "No code")
    with pytest.raises(DomainError):
        repo.create("X-1", "Bad", weight_grams=-1)
    with pytest.raises(DomainError):
        repo.create("X-2", "Bad", stock_quantity=-1)


def test_to_cart_item_snapshots_product(conn):
    make_ring(conn, stone_carat_weight=Decimal("0.25"), stone_rate_per_carat=Decimal("40000"), stone_quantity=1)
    item = ProductsRepo(conn).to_cart_item("RNG-001", 2)
    assert item.product_id == "RNG-001"
    assert item.quantity == 2
    assert item.unit_weight_grams == Decimal("10")
    assert item.material_type == "22K"
    assert item.has_stones
    assert item.stone_carat_weight == Decimal("0.25")
    with pytest.raises(DomainError):
        ProductsRepo(conn).to_cart_item("NOPE")


def test_reduce_stock(conn):
    make_ring(conn)
    repo = ProductsRepo(conn)
    assert repo.reduce_stock("RNG-001", 1) == 1
    with pytest.raises(DomainError, match="Insufficient stock"):
        repo.reduce_stock("RNG-001", 2)
    assert repo.get("RNG-001").stock_quantity == 1
    with pytest.raises(DomainError, match="not found"):
        repo.reduce_stock("NOPE", 1)


def test_stones_and_definition_price(conn):
    make_ring(conn)
    repo = ProductsRepo(conn)
    repo.add_stone("RNG-001", "Kundan", weight=Decimal("1"), amount=Decimal("1000"))
    repo.add_stone("RNG-001", "Ruby", weight=Decimal("0.5"), quantity=2, rate=Decimal("250"))
    stones = repo.list_stones("RNG-001")
    assert [s.name for s in stones] == ["Kundan", "Ruby"]
    assert stones[1].amount == Decimal("500")

    r = repo.definition_price(
        "RNG-001", making_percentage=10, labour_rate_per_gram=50, gold_rate_per_gram=6000
    )
    # 11 g after making, 1.5 g of stones
    assert r.effective_metal_weight == Decimal("9.5")
    assert r.total_price == Decimal("57000") + Decimal("1500") + Decimal("550")

    with pytest.raises(DomainError):
        repo.add_stone("NOPE", "Kundan")


# ---------------- customers ----------------

def test_customer_create_and_balance(conn):
    repo = CustomersRepo(conn)
    cid = repo.create("  Asha  ", "98765 43210")
    assert repo.get(cid).name == "Asha"
    assert repo.adjust_balance(cid, Decimal("1500.50")) == Decimal("1500.50")
    assert repo.adjust_balance(cid, Decimal("-500")) == Decimal("1000.50")
    assert repo.get(cid).balance == Decimal("1000.50")
    with pytest.raises(CustomersDomainError):
        repo.create(" ", "x")
    with pytest.raises(CustomersDomainError):
        repo.adjust_balance(999, 1)


# ---------------- orders ----------------

def _header(order_id, customer_id=None, due=Decimal("0")):
    z = Decimal("0")
    return OrderHeader(
        order_id=order_id, customer_id=customer_id, date="2024-01-05",
        subtotal=Decimal("1000"), discount_mode=None, discount_value=z, discount_amount=z,
        gst_rate_percent=Decimal("18"), gst_amount=Decimal("180"), exchange_credit=z,
        final_total=Decimal("1180"), round_off=z, net_amount=Decimal("1180"),
        cash=Decimal("1180") - due, card=z, bank=z, online=z, due=due,
        paid_amount=Decimal("1180") - due, payment_status="paid" if due == 0 else "partial",
    )


def _item(qty=1):
    z = Decimal("0")
    return OrderItem(
        item_id=None, order_id="", product_id="RNG-001", name="Plain Band", quantity=qty,
        net_weight=Decimal("10"), material_rate=Decimal("100"), rate_source="custom",
        material_cost=Decimal("1000"), making_charges=z, stone_amount=z, va_charges=z,
        line_total=Decimal("1000") * qty,
    )


def test_order_ids_are_sequential_per_day(conn):
    make_ring(conn)
    repo = OrdersRepo(conn)
    first = repo.new_order_id("2024-01-05")
    assert first == "ORD20240105-0001"
    repo.save_order(_header(first), [_item()])
    assert repo.new_order_id("2024-01-05") == "ORD20240105-0002"
    assert repo.new_order_id("2024-01-06") == "ORD20240106-0001"


def test_save_order_posts_stock_and_balance(conn):
    make_ring(conn)
    cid = CustomersRepo(conn).create("Asha", "98765")
    repo = OrdersRepo(conn)
    oid = repo.save_order(_header("ORD20240105-0001", cid, due=Decimal("180")), [_item()])

    row = repo.get_order(oid)
    assert row["payment_status"] == "partial"
    assert row["order_status"] == "confirmed"
    assert len(repo.list_items(oid)) == 1
    assert ProductsRepo(conn).get("RNG-001").stock_quantity == 1
    assert CustomersRepo(conn).get(cid).balance == Decimal("180")
    assert [r["order_id"] for r in repo.list_orders(cid)] == [oid]
    assert repo.list_orders(customer_id=cid + 1) == []


def test_failed_save_rolls_back(conn):
    make_ring(conn)
    repo = OrdersRepo(conn)
    with pytest.raises(OrdersDomainError, match="Insufficient stock"):
        repo.save_order(_header("ORD20240105-0001"), [_item(qty=3)])
    assert repo.get_order("ORD20240105-0001") is None
    assert ProductsRepo(conn).get("RNG-001").stock_quantity == 2


def test_due_needs_a_customer(conn):
    make_ring(conn)
    with pytest.raises(OrdersDomainError, match="customer"):
        OrdersRepo(conn).save_order(_header("ORD20240105-0001", due=Decimal("10")), [_item()])


def test_order_needs_items(conn):
    with pytest.raises(OrdersDomainError):
        OrdersRepo(conn).save_order(_header("ORD20240105-0001"), [])


def test_failed_line_rolls_back_earlier_lines(conn):
    make_ring(conn)
    repo = OrdersRepo(conn)
    with pytest.raises(OrdersDomainError, match="Insufficient stock"):
        repo.save_order(_header("ORD20240105-0001"), [_item(qty=1), _item(qty=2)])
    assert repo.list_orders() == []
    assert ProductsRepo(conn).get("RNG-001").stock_quantity == 2


def test_sub_paisa_due_is_not_an_amount_owed(conn):
    make_ring(conn)
    repo = OrdersRepo(conn)
    oid = repo.save_order(_header("ORD20240105-0001", due=Decimal("0.004")), [_item()])
    assert repo.get_order(oid) is not None
