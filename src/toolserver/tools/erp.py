"""ERP toolset: read-only lookups over mock business records."""

from __future__ import annotations

import copy
from collections.abc import Iterable
from typing import Any

from pydantic import Field

from toolserver.errors import InvalidRequestError
from toolserver.registry import ToolArgs, ToolRegistry, ToolSpec
from toolserver.tools.erp_data import CUSTOMERS, INVENTORY, INVOICES, ORDERS, PRODUCTS

TOOLSET = "erp"


def filter_records(
    records: Iterable[dict[str, Any]], **criteria: Any
) -> list[dict[str, Any]]:
    """Return records matching every given field exactly.

    A criterion of ``None`` places no constraint on that field.
    """
    active = {key: value for key, value in criteria.items() if value is not None}
    return [
        copy.deepcopy(record)
        for record in records
        if all(record.get(key) == value for key, value in active.items())
    ]


def find_record(
    records: Iterable[dict[str, Any]], *, key: str, value: Any, label: str
) -> dict[str, Any]:
    """Return the record whose ``key`` equals ``value`` or fail with InvalidRequest."""
    for record in records:
        if record.get(key) == value:
            return copy.deepcopy(record)
    raise InvalidRequestError(f"{label} {value} not found")


class CustomerFilterArgs(ToolArgs):
    status: str | None = Field(default=None, description="Customer status (active, inactive)")


class CustomerIdArgs(ToolArgs):
    id: str = Field(..., description="Customer ID, e.g. C-1001")


class ProductFilterArgs(ToolArgs):
    category: str | None = Field(default=None, description="Product category")


class ProductSkuArgs(ToolArgs):
    sku: str = Field(..., description="Product SKU, e.g. SKU-100")


class InventoryArgs(ToolArgs):
    sku: str | None = Field(default=None, description="Product SKU")
    warehouse: str | None = Field(default=None, description="Warehouse code, e.g. IST-01")


class OrderFilterArgs(ToolArgs):
    status: str | None = Field(default=None, description="Order status")
    customer_id: str | None = Field(default=None, description="Customer ID")


class OrderIdArgs(ToolArgs):
    id: str = Field(..., description="Sales order ID, e.g. SO-5001")


class InvoiceFilterArgs(ToolArgs):
    status: str | None = Field(default=None, description="Invoice status (open, paid, overdue)")
    customer_id: str | None = Field(default=None, description="Customer ID")


class InvoiceIdArgs(ToolArgs):
    id: str = Field(..., description="Invoice ID, e.g. INV-9001")


async def _list_customers(args: CustomerFilterArgs) -> list[dict[str, Any]]:
    return filter_records(CUSTOMERS, status=args.status)


async def _get_customer(args: CustomerIdArgs) -> dict[str, Any]:
    return find_record(CUSTOMERS, key="id", value=args.id, label="Customer")


async def _list_products(args: ProductFilterArgs) -> list[dict[str, Any]]:
    return filter_records(PRODUCTS, category=args.category)


async def _get_product(args: ProductSkuArgs) -> dict[str, Any]:
    return find_record(PRODUCTS, key="sku", value=args.sku, label="Product")


async def _check_inventory(args: InventoryArgs) -> list[dict[str, Any]]:
    return filter_records(INVENTORY, sku=args.sku, warehouse=args.warehouse)


async def _list_orders(args: OrderFilterArgs) -> list[dict[str, Any]]:
    return filter_records(ORDERS, status=args.status, customer_id=args.customer_id)


async def _get_order(args: OrderIdArgs) -> dict[str, Any]:
    order = find_record(ORDERS, key="id", value=args.id, label="Order")
    order["total"] = round(
        sum(line["quantity"] * line["unit_price"] for line in order["lines"]), 2
    )
    return order


async def _list_invoices(args: InvoiceFilterArgs) -> list[dict[str, Any]]:
    return filter_records(INVOICES, status=args.status, customer_id=args.customer_id)


async def _get_invoice(args: InvoiceIdArgs) -> dict[str, Any]:
    return find_record(INVOICES, key="id", value=args.id, label="Invoice")


_TOOLS: tuple[tuple[str, str, type[ToolArgs], Any], ...] = (
    ("erp_list_customers", "List customers, optionally filtered by status", CustomerFilterArgs, _list_customers),
    ("erp_get_customer", "Get a customer by ID", CustomerIdArgs, _get_customer),
    ("erp_list_products", "List products, optionally filtered by category", ProductFilterArgs, _list_products),
    ("erp_get_product", "Get a product by SKU", ProductSkuArgs, _get_product),
    ("erp_check_inventory", "Stock levels filtered by SKU and/or warehouse", InventoryArgs, _check_inventory),
    ("erp_list_orders", "List sales orders filtered by status and/or customer", OrderFilterArgs, _list_orders),
    ("erp_get_order", "Get a sales order by ID, with its computed total", OrderIdArgs, _get_order),
    ("erp_list_invoices", "List invoices filtered by status and/or customer", InvoiceFilterArgs, _list_invoices),
    ("erp_get_invoice", "Get an invoice by ID", InvoiceIdArgs, _get_invoice),
)


def register(registry: ToolRegistry) -> None:
    """Register the ERP lookup tools."""
    for name, description, args_model, handler in _TOOLS:
        registry.register(
            ToolSpec(
                name=name,
                description=description,
                args_model=args_model,
                handler=handler,
                toolset=TOOLSET,
            )
        )
