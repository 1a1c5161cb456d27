"""Tests for the HTTP endpoints."""
import pytest
from fastapi.testclient import TestClient

from finanzplan.main import app

PREFIX = "/api/finanzplan"


@pytest.fixture
def client():
    return TestClient(app)


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


# =============================================================================
# Calculators
# =============================================================================

class TestCalculatorEndpoints:

    def test_kapitalbedarf(self, client, snapshot_payload):
        response = client.post(f"{PREFIX}/kapitalbedarf", json=snapshot_payload["kapitalbedarf"])
        assert response.status_code == 200
        data = response.json()
        assert data["gesamtkapitalbedarf"] == "40500.00"
        assert data["anlaufkosten"]["summe"] == "30000.00"

    def test_kapitalbedarf_rejects_negative_costs(self, client, snapshot_payload):
        payload = dict(snapshot_payload["kapitalbedarf"])
        payload["anlaufkosten"] = {"monate": 6, "monatlicheKosten": -100}
        response = client.post(f"{PREFIX}/kapitalbedarf", json=payload)
        assert response.status_code == 422

    def test_finanzierung(self, client, snapshot_payload):
        response = client.post(f"{PREFIX}/finanzierung", json={
            "quellen": snapshot_payload["finanzierung"]["quellen"],
            "kapitalbedarf": 40500,
        })
        assert response.status_code == 200
        data = response.json()
        assert data["eigenkapitalQuote"] == "50.62"
        assert data["finanzierungsluecke"] == "0.00"

    def test_kredit_with_plan(self, client):
        response = client.post(f"{PREFIX}/finanzierung/kredit", json={
            "betrag": 20000, "zinssatz": 4.5, "laufzeit": 60, "mitTilgungsplan": True,
        })
        assert response.status_code == 200
        data = response.json()
        assert data["zahlung"]["monthlyPayment"] == "372.86"
        assert len(data["tilgungsplan"]) == 60
        assert data["tilgungsplan"][-1]["balance"] == "0.00"

    def test_kredit_without_plan(self, client):
        response = client.post(f"{PREFIX}/finanzierung/kredit", json={
            "betrag": 20000, "zinssatz": 4.5, "laufzeit": 60,
        })
        assert "tilgungsplan" not in response.json()

    def test_gruendungszuschuss(self, client):
        response = client.post(f"{PREFIX}/finanzierung/gruendungszuschuss", json={"alg1Monatlich": 1200})
        assert response.status_code == 200
        data = response.json()
        assert data["gruendungszuschuss"]["totalGZ"] == "11700.00"
        assert data["auszahlungen"][:7] == ["1500.00"] * 6 + ["300.00"]

    def test_privatentnahme(self, client, snapshot_payload):
        response = client.post(f"{PREFIX}/privatentnahme", json={
            "privatentnahme": snapshot_payload["privatentnahme"],
            "region": "München",
            "familyStatus": "single",
        })
        assert response.status_code == 200
        data = response.json()
        assert data["privatentnahme"]["monatlichePrivatentnahme"] == "1900.00"
        assert {"analyse", "validierung", "regional", "vergleich"} <= set(data)

    def test_privatentnahme_without_context(self, client, snapshot_payload):
        response = client.post(f"{PREFIX}/privatentnahme", json={
            "privatentnahme": snapshot_payload["privatentnahme"],
        })
        data = response.json()
        assert "regional" not in data
        assert "vergleich" not in data


# =============================================================================
# Analyses
# =============================================================================

class TestAnalysisEndpoints:

    def test_break_even(self, client):
        response = client.post(f"{PREFIX}/break-even", json={
            "fixkostenMonatlich": 3000, "variableKostenProzent": 10,
        })
        assert response.status_code == 200
        data = response.json()
        assert data["breakEven"]["breakEvenUmsatzMonatlich"] == "3333.33"
        assert len(data["sensitivitaet"]) == 2
        assert len(data["szenarien"]) == 3

    def test_break_even_rejects_full_variable_costs(self, client):
        response = client.post(f"{PREFIX}/break-even", json={
            "fixkostenMonatlich": 3000, "variableKostenProzent": 150,
        })
        assert response.status_code == 422

    def test_rentabilitaet(self, client, snapshot_payload):
        response = client.post(f"{PREFIX}/rentabilitaet", json={
            "umsatzplanung": snapshot_payload["umsatzplanung"],
            "kostenplanung": snapshot_payload["kostenplanung"],
            "industry": "beratung",
            "jaehrlichePrivatentnahme": 22800,
        })
        assert response.status_code == 200
        data = response.json()
        assert data["rentabilitaet"]["jahr1"]["jahresueberschuss"] == "32362.20"
        assert data["validierung"]["isBACompliant"] is True


# =============================================================================
# Workshop
# =============================================================================

class TestWorkshopEndpoints:

    def test_liquiditaet(self, client, snapshot_payload):
        response = client.post(f"{PREFIX}/liquiditaet", json=snapshot_payload)
        assert response.status_code == 200
        data = response.json()
        assert data["liquiditaet"]["minimumLiquiditaet"] == "20481.42"
        assert len(data["liquiditaet"]["monate"]) == 12
        assert data["compliance"]["readyForNextModule"] is True

    def test_liquiditaet_needs_complete_snapshot(self, client, snapshot_payload):
        response = client.post(f"{PREFIX}/liquiditaet", json={
            "kapitalbedarf": snapshot_payload["kapitalbedarf"],
        })
        assert response.status_code == 422

    def test_run(self, client, snapshot_payload):
        response = client.post(f"{PREFIX}/run", json=snapshot_payload)
        assert response.status_code == 200
        data = response.json()
        assert data["compliance"]["readyForNextModule"] is True
        assert data["kapitalbedarf"]["gesamtkapitalbedarf"] == "40500.00"

    def test_run_empty_snapshot(self, client):
        data = client.post(f"{PREFIX}/run", json={}).json()
        assert data["compliance"]["readyForNextModule"] is False
        assert len(data["compliance"]["blockers"]) == 6

    def test_merge(self, client, snapshot_payload):
        first = client.post(f"{PREFIX}/merge", json={
            "update": {"kapitalbedarf": snapshot_payload["kapitalbedarf"]},
        })
        assert first.status_code == 200
        merged = client.post(f"{PREFIX}/merge", json={
            "existing": first.json(),
            "update": {"kapitalbedarf": {"anlaufkosten": {"monate": 3}}},
        }).json()
        assert merged["kapitalbedarf"]["anlaufkosten"]["monate"] == 3
        assert merged["kapitalbedarf"]["anlaufkosten"]["monatlicheKosten"] == "4000"

    def test_merge_carries_drafts_between_requests(self, client, snapshot_payload):
        first = client.post(f"{PREFIX}/merge", json={
            "update": {"umsatzplanung": {"umsatzJahr2": 140000, "umsatzJahr3": 170000}},
        }).json()
        assert first["umsatzplanung"] is None
        assert first["entwuerfe"]["umsatzplanung"]["umsatz_jahr2"] == 140000

        second = client.post(f"{PREFIX}/merge", json={
            "existing": first,
            "update": {"umsatzplanung": {
                "umsatzJahr1": snapshot_payload["umsatzplanung"]["umsatzJahr1"],
            }},
        }).json()
        assert second["entwuerfe"] == {}
        assert second["umsatzplanung"]["umsatzJahr2"] == "140000"

    def test_merge_rejects_unknown_key(self, client):
        response = client.post(f"{PREFIX}/merge", json={"update": {"umsatz": 1}})
        assert response.status_code == 422
