# tests/test_web.py

import pytest
from fastapi.testclient import TestClient

import web.app as web_app
from bf6stats.api_client import TrackerAPIClient
from bf6stats.scraper import NavigationTimeoutError, ScraperBlockedError
from bf6stats.service import StatsService
from tests.helpers import FakeFetcher, load_json


@pytest.fixture
def fetcher(monkeypatch):
    fake = FakeFetcher({
        "/matches/": (200, load_json("bf6_matches.json"), "application/json"),
        "/stats/overview/": (200, load_json("bf6_kd_history.json"), "application/json"),
        "/profile/": (200, load_json("bf6_profile.json"), "application/json"),
    })
    api_client = TrackerAPIClient(fake)
    monkeypatch.setattr(web_app, "api_client", api_client)
    monkeypatch.setattr(web_app, "service", StatsService(api_client))
    return fake


@pytest.fixture
def http():
    return TestClient(web_app.app)


def test_matches_requires_player_id(http, fetcher):
    resp = http.get("/api/matches")
    assert resp.status_code == 400
    assert resp.json() == {"error": "playerId is required"}
    assert fetcher.calls == []


def test_matches_proxies_payload(http, fetcher):
    resp = http.get("/api/matches", params={"playerId": "1009", "platform": "xbl"})

    assert resp.status_code == 200
    assert resp.json() == load_json("bf6_matches.json")
    assert "/matches/xbox/1009" in fetcher.calls[0]["url"]


def test_matches_forwards_browser_headers(http, fetcher):
    http.get(
        "/api/matches",
        params={"playerId": "1009", "_cf_bm_token": "tok"},
        headers={"User-Agent": "UA/9", "Cookie": "cf_clearance=xyz", "Accept-Language": "fr-FR"},
    )
    sent = fetcher.calls[0]["headers"]

    assert sent["User-Agent"] == "UA/9"
    assert sent["Accept-Language"] == "fr-FR"
    assert sent["Cookie"] == "cf_clearance=xyz; _cf_bm_token=tok"
    assert sent["Origin"] == "https://tracker.gg"


def test_matches_upstream_status_passed_through(http, fetcher):
    fetcher.routes["/matches/"] = (404, {}, "application/json")

    resp = http.get("/api/matches", params={"playerId": "1009"})

    assert resp.status_code == 404
    assert resp.json() == {"error": "Failed to fetch matches: Error"}


def test_matches_internal_error(http, fetcher):
    fetcher.routes["/matches/"] = NavigationTimeoutError("slow")

    resp = http.get("/api/matches", params={"playerId": "1009"})

    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}


def test_matches_unknown_platform(http, fetcher):
    resp = http.get("/api/matches", params={"playerId": "1009", "platform": "gog"})
    assert resp.status_code == 400


def test_overview(http, fetcher):
    resp = http.get("/api/overview", params={"playerId": "1009"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["has_data"] is True
    assert body["totals"]["total_kills"] == 890
    assert body["rank"]["player_rank"] == 47


def test_overview_blocked(http, fetcher):
    fetcher.routes["/matches/"] = ScraperBlockedError("challenge")
    resp = http.get("/api/overview", params={"playerId": "1009"})
    assert resp.status_code == 503


def test_overview_timeout(http, fetcher):
    fetcher.routes["/matches/"] = NavigationTimeoutError("slow")
    resp = http.get("/api/overview", params={"playerId": "1009"})
    assert resp.status_code == 504


def test_dashboard(http, fetcher):
    resp = http.get("/api/dashboard", params={"playerId": "1009"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["profile"]["username"] == "SgtPepperoni"
    assert body["current_kd"] == 1.42
    assert body["summary"]["most_played_gamemode"]["key"] == "conquest"


def test_dashboard_with_null_profile_data(http, fetcher):
    fetcher.routes["/profile/"] = (200, {"data": None}, "application/json")

    resp = http.get("/api/dashboard", params={"playerId": "1009"})

    assert resp.status_code == 200
    assert resp.json()["profile"]["username"] == "Player"


def test_platforms(http):
    resp = http.get("/api/platforms")
    assert resp.json()["platforms"]["origin"]["profile"] == "ign"
