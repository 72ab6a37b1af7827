"""Tests for the provider catalog endpoint."""

import gpu_pricing.api.providers as providers_api

PROVIDERS_URL = "/api/providers"


def test_lists_providers_with_regions(client, catalog) -> None:
    resp = client.get(PROVIDERS_URL)

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert [p["code"] for p in body["data"]] == ["aws", "gcp"]

    aws, gcp = body["data"]
    assert aws["regionCount"] == 2
    assert [r["code"] for r in aws["regions"]] == ["us-west-2", "ap-northeast-2"]
    assert aws["regions"][1]["countryCode"] == "KR"
    assert gcp["regionCount"] == 0
    assert gcp["regions"] == []

    assert body["summary"] == {
        "totalProviders": 2,
        "totalRegions": 2,
        "totalInstances": 4,
    }


def test_caps_instance_types_per_region(client, catalog) -> None:
    aws = client.get(PROVIDERS_URL).json()["data"][0]

    oregon = aws["regions"][0]
    assert [i["instanceName"] for i in oregon["instanceTypes"]] == ["p5.48xlarge", "g6.xlarge"]


def test_uses_latest_on_demand_price(client, catalog) -> None:
    aws = client.get(PROVIDERS_URL).json()["data"][0]

    p5 = aws["regions"][0]["instanceTypes"][0]
    # the newer spot price is ignored
    assert p5 == {
        "instanceName": "p5.48xlarge",
        "gpuModel": "H100",
        "gpuCount": 8,
        "vcpu": 192,
        "ram": 2048,
        "price": 32.5,
        "pricePerGpu": 4.06,
    }


def test_missing_price_and_zero_gpus(client, catalog) -> None:
    aws = client.get(PROVIDERS_URL).json()["data"][0]

    seoul = aws["regions"][1]["instanceTypes"]
    nogpu = seoul[1]
    assert nogpu["instanceName"] == "g6.nogpu"
    assert nogpu["price"] == 1.0
    assert nogpu["pricePerGpu"] is None


def test_unpriced_instance_has_null_price(client, catalog, monkeypatch) -> None:
    monkeypatch.setattr(providers_api, "INSTANCES_PER_REGION", 3)

    oregon = client.get(PROVIDERS_URL).json()["data"][0]["regions"][0]["instanceTypes"]

    assert [i["instanceName"] for i in oregon] == ["p5.48xlarge", "g6.xlarge", "g6.2xlarge"]
    assert oregon[2]["price"] is None
    assert oregon[2]["pricePerGpu"] is None


def test_database_failure_is_generic_error(client, monkeypatch) -> None:
    def broken_engine():
        raise RuntimeError("no such table: providers")

    monkeypatch.setattr(providers_api, "get_engine", broken_engine)

    resp = client.get(PROVIDERS_URL)

    assert resp.status_code == 500
    assert resp.json() == {
        "success": False,
        "message": "Failed to fetch providers data",
        "error": "no such table: providers",
    }
