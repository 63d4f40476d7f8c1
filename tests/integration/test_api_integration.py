"""
End-to-end API tests: real routers, exception handlers and database, with the
chain clients replaced by in-memory fakes.
"""

from datetime import timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from launchpad.api.dependencies import get_claim_engine, get_fee_cache, get_launch_service
from launchpad.api.main import app
from launchpad.services.chain.interface import AgentIdentity, ClaimReceipt, DeploySubmission
from launchpad.services.fee_aggregation import FeeAggregationCache
from launchpad.services.fee_claim import FeeClaimEngine
from launchpad.services.launch_service import LaunchService
from launchpad.utils.timeutils import utcnow

PLATFORM = "0x9999999999999999999999999999999999999999"
CLIENT = "0x1111111111111111111111111111111111111111"
DEV = "0x2222222222222222222222222222222222222222"
DEPLOYED = "0x3333333333333333333333333333333333333333"
PAIRED = "0x4200000000000000000000000000000000000006"
TX = "0x" + "cd" * 32


class FakeFeeLocker:
    def __init__(self, balances=None):
        self.balances = {(a.lower(), r.lower()): Decimal(v) for (a, r), v in (balances or {}).items()}
        self.claims = []

    async def available_fees(self, asset, recipient):
        return self.balances.get((asset.lower(), recipient.lower()), Decimal("0"))

    async def claim(self, asset, recipient):
        self.claims.append((asset, recipient))
        self.balances[(asset.lower(), recipient.lower())] = Decimal("0")
        return ClaimReceipt(tx_hash=f"0xtx{len(self.claims)}")


@pytest.fixture
def deploy_client():
    client = MagicMock()
    client.deploy = AsyncMock(
        return_value=DeploySubmission(tx_hash=TX, waiter=AsyncMock(return_value={"address": DEPLOYED}))
    )
    return client


@pytest.fixture
def locker():
    return FakeFeeLocker()


@pytest.fixture
def api(client, token_store, deploy_client, locker):
    identity = MagicMock()
    identity.verify_agent = AsyncMock(return_value=AgentIdentity(agent_id=0, wallet=CLIENT))
    launch_service = LaunchService(
        token_store=token_store,
        deploy_client=deploy_client,
        identity_client=identity,
        platform_wallet=PLATFORM,
        platform_fee_bps=2000,
    )
    fee_cache = FeeAggregationCache(token_store, locker, platform_wallet=PLATFORM, ttl_seconds=300)
    engine = FeeClaimEngine(token_store, locker, platform_wallet=PLATFORM, paired_asset=PAIRED, fee_cache=fee_cache)

    app.dependency_overrides[get_launch_service] = lambda: launch_service
    app.dependency_overrides[get_fee_cache] = lambda: fee_cache
    app.dependency_overrides[get_claim_engine] = lambda: engine
    return client


class TestLaunchEndpoints:
    def test_launch_success(self, api, launch_payload):
        response = api.post("/v1/launch", json=launch_payload, headers={"X-Request-ID": "req-1"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["request_id"] == "req-1"
        assert data["token"]["address"] == DEPLOYED
        assert data["token"]["tx_hash"] == TX
        assert data["token"]["links"]["basescan"] == f"https://basescan.org/token/{DEPLOYED}"
        assert [(r["recipient"], r["bps"], r["label"]) for r in data["rewards"]] == [
            (DEV, 3000, "dev"),
            (CLIENT, 5000, "client"),
            (PLATFORM, 2000, "platform"),
        ]
        assert data["message"] == "Test Agent ($TAGENT) deployed on Base"
        assert response.headers["X-Request-ID"] == "req-1"

    def test_launch_validation_errors(self, api, launch_payload, deploy_client):
        launch_payload["symbol"] = "T"
        launch_payload["clientWallet"] = "not-a-wallet"

        response = api.post("/v1/launch", json=launch_payload)

        assert response.status_code == 400
        data = response.json()
        assert data["detail"] == "Validation failed"
        assert data["status"] == 400
        assert "Invalid wallet address format" in data["errors"]
        assert any(e.startswith("Symbol must be") for e in data["errors"])
        assert data["request_id"]
        deploy_client.deploy.assert_not_awaited()

    def test_second_launch_is_rate_limited(self, api, launch_payload, make_token):
        make_token(requester_address=CLIENT, deployed_at=utcnow() - timedelta(hours=1))

        response = api.post("/v1/launch", json=launch_payload)

        assert response.status_code == 429
        data = response.json()
        assert data["remaining_ms"] > 0
        assert data["cooldown"].startswith("22h") or data["cooldown"].startswith("23h")
        assert data["next_allowed_at"].endswith("Z")

    def test_unregistered_agent_is_forbidden(self, api, launch_payload):
        service = app.dependency_overrides[get_launch_service]()
        service.identity_client.verify_agent = AsyncMock(return_value=None)

        response = api.post("/v1/launch", json=launch_payload)

        assert response.status_code == 403
        assert response.json()["detail"] == "Wallet is not a registered agent"

    def test_deploy_rejection_is_bad_request(self, api, launch_payload, deploy_client):
        deploy_client.deploy = AsyncMock(return_value=DeploySubmission(error="symbol reserved on factory"))

        response = api.post("/v1/launch", json=launch_payload)

        assert response.status_code == 400
        assert response.json()["detail"] == "Deployment rejected"

    def test_deploy_fault_is_sanitized(self, api, launch_payload, deploy_client):
        deploy_client.deploy = AsyncMock(side_effect=RuntimeError("insufficient funds for gas * price + value"))

        response = api.post("/v1/launch", json=launch_payload)

        assert response.status_code == 502
        data = response.json()
        assert data["detail"] == "Insufficient gas, contact support"
        assert "price" not in data["detail"]

    def test_preview_warns_when_rate_limited(self, api, launch_payload, make_token, deploy_client):
        make_token(requester_address=CLIENT, symbol="OTHER")

        response = api.post("/v1/launch/preview", json=launch_payload)

        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is True
        assert any(w.startswith("Rate limited: next launch in") for w in data["warnings"])
        assert data["normalized"]["symbol"] == "TAGENT"
        deploy_client.deploy.assert_not_awaited()

    def test_rate_limit_status(self, api, make_token):
        response = api.get(f"/v1/rate-limit/{CLIENT}")
        assert response.json() == {"allowed": True, "next_allowed_at": None, "remaining_ms": 0, "cooldown": None}

        make_token(requester_address=CLIENT)
        data = api.get(f"/v1/rate-limit/{CLIENT}").json()
        assert data["allowed"] is False
        assert data["remaining_ms"] > 0

    def test_rate_limit_rejects_bad_wallet(self, api):
        assert api.get("/v1/rate-limit/0x123").status_code == 400


class TestTokenEndpoints:
    def test_list_tokens_paginated(self, api, make_token):
        for _ in range(3):
            make_token()

        response = api.get("/v1/tokens", params={"page": 2, "limit": 2})

        assert response.status_code == 200
        data = response.json()
        assert len(data["tokens"]) == 1
        assert data["pagination"] == {"page": 2, "limit": 2, "total": 3, "total_pages": 2}

    def test_list_tokens_rejects_unknown_sort(self, api):
        assert api.get("/v1/tokens", params={"sort": "oldest"}).status_code == 422

    def test_get_token(self, api, make_token):
        token = make_token(symbol="ABC")

        response = api.get(f"/v1/tokens/{token.token_address.upper().replace('0X', '0x')}")

        assert response.status_code == 200
        data = response.json()
        assert data["symbol"] == "ABC"
        assert data["status"] == "active"
        assert Decimal(data["total_fees_claimed_paired"]) == 0

    def test_get_unknown_token(self, api):
        assert api.get("/v1/tokens/0x" + "e" * 40).status_code == 404

    def test_client_tokens(self, api, make_token):
        make_token(requester_address=CLIENT)
        make_token(requester_address=DEV)

        response = api.get(f"/v1/clients/{CLIENT}/tokens")

        assert response.status_code == 200
        assert [t["requester_address"] for t in response.json()] == [CLIENT]
        assert api.get("/v1/clients/bad/tokens").status_code == 400

    def test_stats(self, api, make_token, token_store):
        token = make_token(requester_address=CLIENT)
        make_token(requester_address=DEV)
        token_store.record_fee_claim(token.token_address, "0x01", Decimal("0.5"), Decimal("0"))

        data = api.get("/v1/stats").json()

        assert data["total_tokens_deployed"] == 2
        assert data["active_tokens"] == 2
        assert data["unique_clients"] == 2
        assert Decimal(data["total_fees_claimed_paired"]) == Decimal("0.5")
        assert data["total_fee_claims"] == 1

    def test_stats_rejects_unknown_period(self, api):
        assert api.get("/v1/stats", params={"period": "7d"}).status_code == 422


class TestAnalyticsEndpoints:
    def test_token_analytics(self, api, make_token):
        token = make_token(symbol="ABC")

        response = api.get(f"/v1/analytics/token/{token.token_address}")

        assert response.status_code == 200
        data = response.json()
        assert data["client_fee_bps"] == 8000
        assert data["links"]["dexscreener"].endswith(token.token_address)
        assert api.get("/v1/analytics/token/0x" + "e" * 40).status_code == 404

    def test_agent_analytics(self, api, make_token):
        make_token(requester_address=CLIENT)

        data = api.get(f"/v1/analytics/agent/{CLIENT}").json()

        assert data["total_launches"] == 1
        assert data["total_fees_earned"] == "0.000000"

    def test_leaderboard(self, api, make_token):
        make_token(requester_address=CLIENT)
        make_token(requester_address=CLIENT)
        make_token(requester_address=DEV)

        data = api.get("/v1/analytics/leaderboard", params={"limit": 1}).json()

        assert len(data) == 1
        assert data[0]["rank"] == 1
        assert data[0]["wallet"] == CLIENT
        assert data[0]["launches"] == 2
        assert api.get("/v1/analytics/leaderboard", params={"limit": 101}).status_code == 422


class TestFeeEndpoints:
    def test_check_fees(self, api, make_token, locker):
        token = make_token(requester_address=CLIENT)
        locker.balances[(PAIRED.lower(), CLIENT.lower())] = Decimal("0.25")

        response = api.get(f"/v1/fees/{token.token_address}")

        assert response.status_code == 200
        data = response.json()
        assert data["available"] is True
        assert Decimal(data["client"]["paired_amount"]) == Decimal("0.25")
        assert Decimal(data["platform"]["paired_amount"]) == 0

    def test_check_fees_unknown_token(self, api):
        assert api.get("/v1/fees/0x" + "e" * 40).status_code == 404

    def test_claim_with_nothing_available(self, api, make_token, locker):
        token = make_token()

        response = api.post(f"/v1/fees/{token.token_address}/claim")

        assert response.status_code == 200
        assert response.json() == {"message": "No fees to claim"}
        assert locker.claims == []

    def test_claim_records_ledger(self, api, make_token, locker, token_store):
        token = make_token(requester_address=CLIENT)
        locker.balances[(PAIRED.lower(), PLATFORM.lower())] = Decimal("0.5")

        response = api.post(f"/v1/fees/{token.token_address}/claim")

        assert response.status_code == 200
        data = response.json()
        assert data["tx_hash"] == "0xtx1"
        assert Decimal(data["paired_claimed"]) == Decimal("0.5")
        assert len(token_store.list_fee_claims(token.token_address)) == 1

    def test_claim_requires_api_key_when_configured(self, api, make_token):
        token = make_token()

        with patch("launchpad.api.dependencies.settings.API_KEY", "secret"):
            assert api.post(f"/v1/fees/{token.token_address}/claim").status_code == 401
            assert api.post("/v1/fees/claim-all", headers={"Authorization": "Bearer wrong"}).status_code == 401
            response = api.post("/v1/fees/claim-all", headers={"Authorization": "Bearer secret"})

        assert response.status_code == 200

    def test_claim_all(self, api, make_token, locker):
        funded = make_token(requester_address=CLIENT)
        make_token(requester_address=CLIENT)
        locker.balances[(funded.token_address.lower(), CLIENT.lower())] = Decimal("1")

        data = api.post("/v1/fees/claim-all").json()

        assert [c["token_address"] for c in data["claimed"]] == [funded.token_address]
        assert len(data["skipped"]) == 1
        assert data["errors"] == []

    def test_aggregate(self, api, make_token, locker):
        token = make_token(requester_address=CLIENT)
        locker.balances[(token.token_address.lower(), PLATFORM.lower())] = Decimal("2")
        locker.balances[(token.token_address.lower(), CLIENT.lower())] = Decimal("0.5")

        response = api.get("/v1/fees/aggregate")

        assert response.status_code == 200
        data = response.json()
        assert data["token_count"] == 1
        assert Decimal(data["total_paired_value"]) == Decimal("2.5")
        assert data["built_at"].endswith("Z")
        assert data["expires_at"].endswith("Z")


class TestServiceEndpoints:
    def test_health(self, api):
        data = api.get("/health").json()

        assert data["status"] == "ok"
        assert data["chain_id"] == 8453
        assert data["platform_fee_bps"] == 2000

    def test_root(self, api):
        assert api.get("/").json()["message"] == "Agent token launchpad API"

    def test_request_id_generated(self, api):
        response = api.get("/health")
        assert len(response.headers["X-Request-ID"]) == 12
