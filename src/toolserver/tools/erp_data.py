"""Static mock ERP records.

Read-only fixtures. Order lines and inventory rows reference product SKUs and
invoices reference orders, but nothing enforces those links.
"""

from __future__ import annotations

from typing import Any

CUSTOMERS: tuple[dict[str, Any], ...] = (
    {
        "id": "C-1001",
        "name": "Anadolu Gida A.S.",
        "email": "purchasing@anadolugida.example",
        "city": "Istanbul",
        "segment": "enterprise",
        "status": "active",
        "credit_limit": 250000,
    },
    {
        "id": "C-1002",
        "name": "Ege Tekstil Ltd.",
        "email": "info@egetekstil.example",
        "city": "Izmir",
        "segment": "smb",
        "status": "active",
        "credit_limit": 75000,
    },
    {
        "id": "C-1003",
        "name": "Karadeniz Lojistik",
        "email": "ops@karadenizlojistik.example",
        "city": "Trabzon",
        "segment": "smb",
        "status": "inactive",
        "credit_limit": 40000,
    },
    {
        "id": "C-1004",
        "name": "Baskent Yapi Market",
        "email": "siparis@baskentyapi.example",
        "city": "Ankara",
        "segment": "enterprise",
        "status": "active",
        "credit_limit": 180000,
    },
)

PRODUCTS: tuple[dict[str, Any], ...] = (
    {
        "sku": "SKU-100",
        "name": "Industrial Drill",
        "category": "tools",
        "unit_price": 1450.0,
        "currency": "TRY",
    },
    {
        "sku": "SKU-200",
        "name": "Safety Helmet",
        "category": "safety",
        "unit_price": 320.0,
        "currency": "TRY",
    },
    {
        "sku": "SKU-300",
        "name": "Work Gloves (pair)",
        "category": "safety",
        "unit_price": 85.5,
        "currency": "TRY",
    },
    {
        "sku": "SKU-400",
        "name": "Cordless Screwdriver",
        "category": "tools",
        "unit_price": 990.0,
        "currency": "TRY",
    },
)

INVENTORY: tuple[dict[str, Any], ...] = (
    {"sku": "SKU-100", "warehouse": "IST-01", "quantity": 42, "reorder_level": 10},
    {"sku": "SKU-100", "warehouse": "ANK-01", "quantity": 7, "reorder_level": 10},
    {"sku": "SKU-200", "warehouse": "IST-01", "quantity": 310, "reorder_level": 50},
    {"sku": "SKU-300", "warehouse": "IZM-01", "quantity": 0, "reorder_level": 100},
    {"sku": "SKU-400", "warehouse": "ANK-01", "quantity": 25, "reorder_level": 5},
)

ORDERS: tuple[dict[str, Any], ...] = (
    {
        "id": "SO-5001",
        "customer_id": "C-1001",
        "status": "shipped",
        "order_date": "2024-03-04",
        "lines": [
            {"sku": "SKU-100", "quantity": 5, "unit_price": 1450.0},
            {"sku": "SKU-200", "quantity": 20, "unit_price": 320.0},
        ],
    },
    {
        "id": "SO-5002",
        "customer_id": "C-1002",
        "status": "pending",
        "order_date": "2024-03-11",
        "lines": [{"sku": "SKU-300", "quantity": 200, "unit_price": 85.5}],
    },
    {
        "id": "SO-5003",
        "customer_id": "C-1001",
        "status": "pending",
        "order_date": "2024-03-15",
        "lines": [{"sku": "SKU-400", "quantity": 10, "unit_price": 990.0}],
    },
    {
        "id": "SO-5004",
        "customer_id": "C-1004",
        "status": "cancelled",
        "order_date": "2024-02-27",
        "lines": [{"sku": "SKU-200", "quantity": 15, "unit_price": 320.0}],
    },
)

INVOICES: tuple[dict[str, Any], ...] = (
    {
        "id": "INV-9001",
        "order_id": "SO-5001",
        "customer_id": "C-1001",
        "amount": 13650.0,
        "currency": "TRY",
        "status": "paid",
        "due_date": "2024-04-03",
    },
    {
        "id": "INV-9002",
        "order_id": "SO-5002",
        "customer_id": "C-1002",
        "amount": 17100.0,
        "currency": "TRY",
        "status": "open",
        "due_date": "2024-04-10",
    },
    {
        "id": "INV-9003",
        "order_id": "SO-5003",
        "customer_id": "C-1001",
        "amount": 9900.0,
        "currency": "TRY",
        "status": "overdue",
        "due_date": "2024-03-30",
    },
)
