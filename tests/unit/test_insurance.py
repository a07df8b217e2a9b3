"""Unit tests for insurance vault claims"""

from dataclasses import replace

import pytest
from quantara_gateway.domain.insurance import create_vault, is_healthy, process_claim


@pytest.fixture
def vault(now):
    return replace(create_vault("pool-001", 1000, 0.15, now=now), claims_paid=250)


def test_claim_within_reserve(vault):
    updated = process_claim(vault, 300)

    assert updated.total_reserve == 700
    assert updated.claims_paid == 550
    assert updated.status == "active"


def test_claim_equal_to_reserve_does_not_deplete(vault):
    updated = process_claim(vault, 1000)

    assert updated.total_reserve == 0
    assert updated.claims_paid == 1250
    assert updated.status == "active"


def test_claim_exceeding_reserve_pays_only_prior_reserve(vault):
    """The 500 beyond the reserve is dropped and not reported anywhere"""
    updated = process_claim(vault, 1500)

    assert updated.total_reserve == 0
    assert updated.claims_paid == 1250  # 250 + prior reserve 1000, not + 1500
    assert updated.status == "depleted"
    assert not hasattr(updated, "shortfall")
    assert vault.total_reserve == 1000


def test_claim_one_over_reserve(vault):
    updated = process_claim(vault, vault.total_reserve + 1)

    assert updated.total_reserve == 0
    assert updated.claims_paid == vault.claims_paid + vault.total_reserve
    assert updated.status == "depleted"


def test_is_healthy(vault):
    assert is_healthy(vault) is True
    assert is_healthy(vault, required_ratio=0.2) is False
    assert is_healthy(process_claim(vault, 5000)) is False
    assert is_healthy(replace(vault, status="suspended")) is False
