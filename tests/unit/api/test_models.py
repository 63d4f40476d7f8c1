"""
Tests for API request/response models.
"""

from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace

from launchpad.api.models import LaunchRequest, TokenItem
from launchpad.config import Settings
from launchpad.models.token import TokenStatus

CLIENT = "0x1111111111111111111111111111111111111111"
DEV = "0x2222222222222222222222222222222222222222"


class TestLaunchRequest:
    def test_accepts_camel_case_aliases(self):
        request = LaunchRequest(
            name="Test Agent",
            symbol="TAGENT",
            clientWallet=CLIENT,
            feeSplit=[{"wallet": DEV, "share": 30, "role": "dev"}],
            devBuyEth="0.01",
        )

        assert request.requester == CLIENT
        assert request.fee_split[0].address == DEV
        assert request.initial_buy == Decimal("0.01")

    def test_accepts_field_names(self):
        request = LaunchRequest(
            name="Test Agent",
            symbol="TAGENT",
            requester=CLIENT,
            fee_split=[{"address": DEV, "share": 30}],
            agent_id=7,
        )

        assert request.requester == CLIENT
        assert request.fee_split[0].address == DEV
        assert request.agent_id == 7


def test_token_item_reads_orm_attributes():
    record = SimpleNamespace(
        id=1,
        name="Test Agent",
        symbol="TAGENT",
        token_address="0x3333333333333333333333333333333333333333",
        tx_hash="0x" + "cd" * 32,
        requester_address=CLIENT,
        requester_bps=8000,
        platform_bps=2000,
        vault_percentage=10,
        description=None,
        image=None,
        website=None,
        twitter=None,
        deployed_at=datetime(2026, 1, 1),
        total_fees_claimed_paired=Decimal("0.25"),
        total_fees_claimed_token=Decimal("0"),
        status=TokenStatus.ACTIVE,
    )

    data = TokenItem.model_validate(record).model_dump(mode="json")

    assert data["total_fees_claimed_paired"] == "0.25"
    assert data["status"] == "active"


def test_settings_ignore_unknown_environment(monkeypatch):
    monkeypatch.setenv("SOME_UNRELATED_SETTING", "x")
    monkeypatch.setenv("PLATFORM_FEE_BPS", "1500")

    settings = Settings()

    assert settings.PLATFORM_FEE_BPS == 1500
    assert not hasattr(settings, "SOME_UNRELATED_SETTING")
