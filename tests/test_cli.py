import csv
import json

import pytest

import run
from crawlme import config
from crawlme.models import Coordinate, DirectionsResult, RouteLeg, Venue


class FakePlacesClient:
    venues = [
        Venue(id="a", name="Alpha", coordinate=Coordinate(40.001, -74.0), rating=4.5, rating_count=300, address="1 A St"),
        Venue(id="b", name="Bravo", coordinate=Coordinate(40.002, -74.0), rating=4.0, rating_count=300, address="2 B St"),
        Venue(id="c", name="Charlie", coordinate=Coordinate(40.003, -74.0), rating=3.5, rating_count=300, address="3 C St"),
    ]

    def __init__(self, http_client):
        self.http = http_client

    def search(self, query, bias, max_results, radius_m=None):
        return list(self.venues)[:max_results]


class FakeRoutesClient:
    calls = []

    def __init__(self, http_client):
        self.http = http_client

    def route(self, origin, destination, waypoints, optimize, mode=None):
        FakeRoutesClient.calls.append((origin, len(waypoints), optimize, mode))
        legs = [RouteLeg(1609, 300) for _ in range(len(waypoints) + 1)]
        return DirectionsResult(legs=legs, order=list(range(len(waypoints))) if optimize else None)


class FakeGeocodingClient:
    def __init__(self, http_client):
        self.http = http_client

    def resolve(self, address):
        return Coordinate(40.0, -74.0)


@pytest.fixture(autouse=True)
def offline(monkeypatch):
    monkeypatch.setattr(run, "load_env", lambda *a, **k: None)
    monkeypatch.setenv("GOOGLE_MAPS_API_KEY", "dummy")
    monkeypatch.setattr(run, "PlacesClient", FakePlacesClient)
    monkeypatch.setattr(run, "RoutesClient", FakeRoutesClient)
    monkeypatch.setattr(run, "GeocodingClient", FakeGeocodingClient)
    monkeypatch.setattr(config, "load_crawl_config", lambda path=None: False)
    FakeRoutesClient.calls = []


def test_cli_plans_crawl_and_writes_outputs(tmp_path, capsys):
    csv_path = tmp_path / "out" / "stops.csv"
    json_path = tmp_path / "out" / "crawl.json"

    code = run.main(
        [
            "--start", "40.0,-74.0",
            "--food", "pizza",
            "--stops", "3",
            "--remove", "2",
            "--csv", str(csv_path),
            "--json", str(json_path),
        ]
    )

    assert code == 0
    out = capsys.readouterr().out
    assert "Route: " in out
    assert "Share: https://crawlme.app/?start=40.0%2C-74.0&q=pizza&r=5" in out
    assert "Navigate: https://www.google.com/maps/dir/?api=1" in out

    rows = list(csv.DictReader(csv_path.open(encoding="utf-8", newline="")))
    assert [r["name"] for r in rows] == ["Alpha", "Charlie"]
    data = json.loads(json_path.read_text(encoding="utf-8"))
    assert data["optimize"] is False
    assert [c[2] for c in FakeRoutesClient.calls] == [True, False]
    assert all(c[3] == config.TRAVEL_MODE for c in FakeRoutesClient.calls)


def test_cli_uses_share_link_settings(capsys):
    code = run.main(["--share-link", "https://crawlme.app/?start=40.0,-74.0&q=bagels&r=2"])
    assert code == 0
    out = capsys.readouterr().out
    assert "Food crawl: bagels within 2 mi" in out
    assert FakeRoutesClient.calls[0][0] == Coordinate(40.0, -74.0)


def test_cli_rejects_bad_start(capsys):
    assert run.main(["--start", "north"]) == 1
    assert "--start" in capsys.readouterr().err


def test_cli_reports_invalid_config(monkeypatch, capsys):
    def bad_config(path=None):
        raise ValueError("scoring.count_log_base must be greater than 1, got 1")

    monkeypatch.setattr(config, "load_crawl_config", bad_config)
    assert run.main(["--config", "crawl_config.json"]) == 1
    assert "count_log_base" in capsys.readouterr().err
    assert FakeRoutesClient.calls == []
