"""Domain services for the category tree."""

from collections.abc import Iterable
from decimal import Decimal

from finledger.domain.models import AccountBalanceLine, Category, CategoryTotal


def resolve_category_types(
    categories: Iterable[Category],
) -> dict[str, str | None]:
    """Return the effective account type of every category.

    The top-level ancestor fixes the type; a category whose ancestors carry
    no type keeps its own.

    Args:
        categories: Categories of one user.

    Returns:
        dict[str, str | None]: Effective type keyed by category id.
    """
    by_id = {category.id: category for category in categories}
    resolved: dict[str, str | None] = {}
    for category in by_id.values():
        root_type = category.account_type
        seen = {category.id}
        parent_id = category.parent_id
        while parent_id in by_id and parent_id not in seen:
            seen.add(parent_id)
            parent = by_id[parent_id]
            if parent.account_type is not None:
                root_type = parent.account_type
            parent_id = parent.parent_id
        resolved[category.id] = root_type
    return resolved


def build_category_totals(
    categories: Iterable[Category],
    lines: Iterable[AccountBalanceLine],
) -> list[CategoryTotal]:
    """Roll converted account lines up the category tree.

    A category total is the sum of its direct accounts plus the totals of
    all its descendants. Categories whose parent is unknown are roots.

    Args:
        categories: Categories to include in the tree.
        lines: Converted account balances.

    Returns:
        list[CategoryTotal]: Root categories with nested children.
    """
    by_id: dict[str, Category] = {}
    for category in categories:
        by_id.setdefault(category.id, category)

    direct_totals: dict[str, Decimal] = {}
    direct_accounts: dict[str, set[str]] = {}
    direct_errors: set[str] = set()
    for line in lines:
        if line.category_id not in by_id:
            continue
        direct_totals[line.category_id] = (
            direct_totals.get(line.category_id, Decimal("0"))
            + line.contribution
        )
        direct_accounts.setdefault(line.category_id, set()).add(
            line.account_id
        )
        if not line.conversion.success:
            direct_errors.add(line.category_id)

    children: dict[str, list[Category]] = {}
    roots: list[Category] = []
    for category in by_id.values():
        if category.parent_id in by_id and category.parent_id != category.id:
            children.setdefault(category.parent_id, []).append(category)
        else:
            roots.append(category)

    visited: set[str] = set()

    def _build(category: Category) -> CategoryTotal:
        visited.add(category.id)
        built_children = [
            _build(child)
            for child in _ordered(children.get(category.id, []))
            if child.id not in visited
        ]
        direct_total = direct_totals.get(category.id, Decimal("0"))
        return CategoryTotal(
            category_id=category.id,
            name=category.name,
            account_type=category.account_type,
            direct_total=direct_total,
            total=direct_total
            + sum((child.total for child in built_children), Decimal("0")),
            account_count=len(direct_accounts.get(category.id, ()))
            + sum(child.account_count for child in built_children),
            has_conversion_errors=category.id in direct_errors
            or any(child.has_conversion_errors for child in built_children),
            parent_id=category.parent_id,
            children=built_children,
        )

    tree = [_build(root) for root in _ordered(roots)]
    # Categories caught in a parent cycle are never reached from a root.
    for category in _ordered(by_id.values()):
        if category.id not in visited:
            tree.append(_build(category))
    return tree


def flatten_category_totals(
    tree: Iterable[CategoryTotal],
) -> list[CategoryTotal]:
    """Return every node of the tree in pre-order."""
    flat: list[CategoryTotal] = []
    stack = list(reversed(list(tree)))
    while stack:
        node = stack.pop()
        flat.append(node)
        stack.extend(reversed(node.children))
    return flat


def _ordered(categories: Iterable[Category]) -> list[Category]:
    return sorted(
        categories,
        key=lambda item: (
            item.order is None,
            item.order or 0,
            item.name.lower(),
            item.id,
        ),
    )


__all__ = [
    "resolve_category_types",
    "build_category_totals",
    "flatten_category_totals",
]
