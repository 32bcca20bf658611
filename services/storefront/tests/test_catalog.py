from __future__ import annotations

from decimal import Decimal

import pytest

from nursery_api.catalog import (
    DEMO_PRODUCTS,
    PLACEHOLDER_IMAGE,
    availability_status,
    build_product_feed,
    build_product_view,
    is_honey,
    sanitize_text,
    to_non_negative,
)

SANITIZE_SAMPLES = [
    "",
    "Olive",
    "  spaced  ",
    "<script>alert(1)</script>Olive",
    "<SCRIPT type='text/javascript'>x</Script>Fig",
    "<script>\nmulti\nline\n</script>Aloe",
    "<<script>script>x</script>>",
    "<b>bold</b>",
    "a < b > c",
    "<script>unclosed",
    "<scr<script>ipt>x</script>",
]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("<script>x</script>Olive", "Olive"),
        ("<ScRiPt src='evil.js'></sCrIpT>Fig tree", "Fig tree"),
        ("<script>\nalert('a')\n</script> Aloe ", "Aloe"),
        ("<b>Croton</b>", "bCroton/b"),
        ("  Moringa  ", "Moringa"),
        (None, ""),
        (42, "42"),
    ],
)
def test_sanitize_text(raw, expected) -> None:
    assert sanitize_text(raw) == expected


@pytest.mark.parametrize("raw", SANITIZE_SAMPLES)
def test_sanitize_is_idempotent_and_strips_angle_brackets(raw) -> None:
    once = sanitize_text(raw)

    assert sanitize_text(once) == once
    assert "<" not in once
    assert ">" not in once


@pytest.mark.parametrize(
    "quantity, expected",
    [
        (0, "Not Available"),
        (1, "Not Available"),
        (9, "Not Available"),
        (10, "Limited"),
        (99, "Limited"),
        (100, "Available"),
        (5000, "Available"),
    ],
)
def test_plant_availability(quantity, expected) -> None:
    assert availability_status(quantity, honey=False) == expected


@pytest.mark.parametrize(
    "quantity, expected",
    [
        (0, "Not Available"),
        (1, "Limited"),
        (9, "Limited"),
        (10, "Available"),
        (100, "Available"),
    ],
)
def test_honey_availability(quantity, expected) -> None:
    assert availability_status(quantity, honey=True) == expected


def test_is_honey() -> None:
    assert is_honey({"item_type": "Honey", "category": "Bee Products"})
    assert is_honey({"item_type": None, "category": "Organic Honey"})
    assert not is_honey({"item_type": None, "category": "Indigenous Trees"})
    assert not is_honey({"item_type": "Consumable", "category": "Pots"})


@pytest.mark.parametrize(
    "value, expected",
    [
        (5, 5),
        (-3, 0),
        (2.5, 2.5),
        (Decimal("12.50"), Decimal("12.50")),
        ("7", 7.0),
        ("abc", 0),
        (None, 0),
        (True, 0),
        (float("nan"), 0),
    ],
)
def test_to_non_negative(value, expected) -> None:
    assert to_non_negative(value) == expected


def test_plant_view_defaults() -> None:
    view = build_product_view({
        "id": "p1",
        "plant_name": "Croton",
        "quantity": 12,
        "price": 350,
        "item_type": None,
        "ready_for_sale": 1,
    })

    assert view["description"] == "High quality Croton seedlings"
    assert view["unit"] == "seedlings"
    assert view["image_url"] == PLACEHOLDER_IMAGE
    assert view["availability_status"] == "Limited"
    assert view["ready_for_sale"] is True
    assert view["scientific_name"] == ""
    assert view["price"] == 350.0


def test_honey_view_defaults() -> None:
    view = build_product_view({
        "id": "h1",
        "plant_name": "Acacia",
        "category": "Organic Honey",
        "quantity": 4,
        "price": Decimal("900.00"),
        "age": "6 months",
    })

    assert view["unit"] == "kg"
    assert view["description"] == "Pure Acacia honey, aged 6 months"
    assert view["availability_status"] == "Limited"
    assert view["price"] == 900.0
    assert view["ready_for_sale"] is False


def test_explicit_fields_are_kept_but_sanitized() -> None:
    view = build_product_view({
        "id": 7,
        "plant_name": "Aloe",
        "quantity": 3,
        "price": 100,
        "unit": "pots",
        "description": "<i>Hardy</i> succulent",
        "image_url": "https://cdn.example.com/aloe.jpg",
    })

    assert view["id"] == "7"
    assert view["unit"] == "pots"
    assert view["description"] == "iHardy/i succulent"
    assert view["image_url"] == "https://cdn.example.com/aloe.jpg"


def test_feed_drops_invalid_rows() -> None:
    rows = [
        {"id": "ok", "plant_name": "Olive", "quantity": 45, "price": 1200},
        {"id": "neg-qty", "plant_name": "Fig", "quantity": -1, "price": 100},
        {"id": "neg-price", "plant_name": "Fig", "quantity": 1, "price": -5},
        {"id": "str-price", "plant_name": "Fig", "quantity": 1, "price": "100"},
        {"id": "bool-qty", "plant_name": "Fig", "quantity": True, "price": 100},
        {"id": None, "plant_name": "Fig", "quantity": 1, "price": 100},
        {"id": "no-name", "plant_name": None, "quantity": 1, "price": 100},
        {"id": "blank-name", "plant_name": "<script>x</script>  ", "quantity": 1, "price": 100},
        {"id": "nan-price", "plant_name": "Fig", "quantity": 1, "price": float("nan")},
    ]

    products = build_product_feed(rows)

    assert [product["id"] for product in products] == ["ok"]


def test_script_injected_name_scenario() -> None:
    rows = [{
        "id": "1",
        "plant_name": "<script>x</script>Olive",
        "quantity": 45,
        "price": 1200,
        "item_type": None,
        "ready_for_sale": True,
    }]

    [product] = build_product_feed(rows)

    assert product["plant_name"] == "Olive"
    assert product["availability_status"] == "Limited"


def test_demo_products_pass_the_pipeline() -> None:
    products = build_product_feed(DEMO_PRODUCTS)

    assert len(products) == len(DEMO_PRODUCTS)
    assert {product["unit"] for product in products} == {"seedlings", "kg"}
