# lm_core/conftest.py
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from lm_core.pricing.types import Addon, AddonQuantity, ServiceDefinition, ServiceVariant, UnitType


@pytest.fixture
def user(db):
    User = get_user_model()
    return User.objects.create_user(username="counter", password="testpass", is_active=True)


@pytest.fixture
def api_client(user):
    c = APIClient()
    c.force_authenticate(user=user)
    return c


@pytest.fixture
def wash_fold():
    """Weight based, 100/kg with a 3 kg minimum."""
    return ServiceDefinition(
        id=1,
        name="Wash & Fold",
        unit_type=UnitType.WEIGHT,
        base_price=Decimal("100.00"),
        minimum_quantity=Decimal("3"),
        gst_rate=Decimal("18"),
        unit_label="kg",
    )


@pytest.fixture
def ironing():
    return ServiceDefinition(
        id=2,
        name="Steam Ironing",
        unit_type=UnitType.PIECE,
        base_price=Decimal("50.00"),
        gst_rate=Decimal("18"),
        unit_label="pc",
    )


@pytest.fixture
def alterations():
    return ServiceDefinition(
        id=3,
        name="Alterations",
        unit_type=UnitType.PIECE,
        base_price=Decimal("500.00"),
        gst_rate=Decimal("5"),
    )


@pytest.fixture
def dry_clean():
    """Dynamic service: price depends on the selected material."""
    return ServiceDefinition(
        id=4,
        name="Dry Clean",
        unit_type=UnitType.PIECE,
        base_price=Decimal("0.00"),
        is_dynamic=True,
    )


@pytest.fixture
def silk_variant():
    return ServiceVariant(id=41, service_id=4, name="Silk Saree", base_price=Decimal("250.00"), gst_rate=Decimal("5"))


@pytest.fixture
def addons():
    return (
        Addon(id=1, name="Starch", price=Decimal("30.00")),
        Addon(id=2, name="Stain Removal", price=Decimal("50.00")),
        Addon(id=3, name="Hanger", price=Decimal("5.00"), gst_rate=Decimal("12")),
    )


@pytest.fixture
def addon_quantities():
    return (
        AddonQuantity(addon_id=1, quantity=Decimal("2")),
        AddonQuantity(addon_id=2, quantity=Decimal("1")),
        AddonQuantity(addon_id=3, quantity=Decimal("5")),
    )
