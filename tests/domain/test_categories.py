"""Tests for category tree rollups."""

from datetime import date
from decimal import Decimal

from finledger.domain.models import (
    AccountBalance,
    AccountBalanceLine,
    Category,
    ConversionResult,
    CurrencyRef,
)
from finledger.domain.services.categories import (
    build_category_totals,
    flatten_category_totals,
    resolve_category_types,
)


def _line(
    account_id: str,
    category_id: str,
    amount: str,
    success: bool = True,
) -> AccountBalanceLine:
    value = Decimal(amount)
    return AccountBalanceLine(
        account_id=account_id,
        account_name=account_id,
        category_id=category_id,
        account_type="ASSET",
        balance=AccountBalance(
            currency_code="CNY",
            amount=value,
            currency=CurrencyRef(code="CNY"),
        ),
        conversion=ConversionResult(
            original_amount=value,
            original_currency="CNY",
            converted_amount=value,
            target_currency="CNY",
            exchange_rate=Decimal("1") if success else None,
            success=success,
            rate_date=date(2024, 1, 1) if success else None,
        ),
        contribution=value,
    )


def _categories() -> list[Category]:
    return [
        Category(id="assets", name="Assets", account_type="ASSET", order=1),
        Category(id="cash", name="Cash", account_type=None, parent_id="assets"),
        Category(id="bank", name="Bank", account_type=None, parent_id="assets"),
        Category(id="savings", name="Savings", account_type=None, parent_id="bank"),
    ]


def test_resolve_category_types_inherits_root_type() -> None:
    """Subcategories take the type of their top-level ancestor."""
    types = resolve_category_types(_categories())

    assert types == {
        "assets": "ASSET",
        "cash": "ASSET",
        "bank": "ASSET",
        "savings": "ASSET",
    }


def test_category_total_includes_descendants() -> None:
    """Totals roll up direct accounts plus every descendant."""
    tree = build_category_totals(
        _categories(),
        [
            _line("wallet", "cash", "50"),
            _line("checking", "bank", "100"),
            _line("deposit", "savings", "1000", success=False),
        ],
    )

    assert [node.category_id for node in tree] == ["assets"]
    root = tree[0]
    assert root.total == Decimal("1150")
    assert root.direct_total == Decimal("0")
    assert root.account_count == 3
    assert root.has_conversion_errors
    assert [child.name for child in root.children] == ["Bank", "Cash"]
    bank = root.children[0]
    assert bank.total == Decimal("1100")
    assert bank.children[0].total == Decimal("1000")
    assert not root.children[1].has_conversion_errors


def test_orphaned_category_becomes_root() -> None:
    """A category whose parent is unknown is reported at the top level."""
    categories = [
        Category(id="loans", name="Loans", account_type="LIABILITY"),
        Category(id="card", name="Card", account_type=None, parent_id="gone"),
    ]

    tree = build_category_totals(categories, [_line("visa", "card", "20")])

    assert sorted(node.category_id for node in tree) == ["card", "loans"]
    card = next(node for node in tree if node.category_id == "card")
    assert card.total == Decimal("20")


def test_parent_cycle_does_not_loop() -> None:
    """Categories pointing at each other are still reported once."""
    categories = [
        Category(id="a", name="A", account_type="ASSET", parent_id="b"),
        Category(id="b", name="B", account_type="ASSET", parent_id="a"),
    ]

    tree = build_category_totals(categories, [_line("x", "a", "5")])
    flat = flatten_category_totals(tree)

    assert sorted(node.category_id for node in flat) == ["a", "b"]
    assert sum(node.direct_total for node in flat) == Decimal("5")


def test_flatten_is_pre_order() -> None:
    """Flattening lists parents before their children."""
    tree = build_category_totals(_categories(), [])

    flat = flatten_category_totals(tree)

    assert [node.category_id for node in flat] == [
        "assets",
        "bank",
        "savings",
        "cash",
    ]
