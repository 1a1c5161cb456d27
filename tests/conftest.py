"""Shared test fixtures: a complete, BA-compliant founding plan."""
from decimal import Decimal

import pytest

from finanzplan.finanzierung import (
    Finanzierungsquelle,
    FinanzierungsquelleTyp,
    GruendungszuschussPlan,
)
from finanzplan.kapitalbedarf import (
    Anlaufkosten,
    Gruendungskosten,
    Investition,
    InvestitionKategorie,
    KapitalbedarfInput,
)
from finanzplan.money import DecimalContext
from finanzplan.planung import Kostenplanung, Umsatzplanung
from finanzplan.privatentnahme import Privatentnahme
from finanzplan.workshop import FinanzierungInput, FinanzplanSnapshot


# =============================================================================
# Context
# =============================================================================

@pytest.fixture
def ctx():
    return DecimalContext(precision=28)


# =============================================================================
# Module inputs
# =============================================================================

@pytest.fixture
def kapitalbedarf_input():
    """5.500 € Gründungskosten, 5.000 € Investitionen, 30.000 € Anlaufkosten."""
    return KapitalbedarfInput(
        gruendungskosten=Gruendungskosten(
            notar=Decimal("800"),
            handelsregister=Decimal("400"),
            beratung=Decimal("1500"),
            marketing=Decimal("2000"),
            sonstige=Decimal("800"),
        ),
        investitionen=[
            Investition(name="Laptop", kategorie=InvestitionKategorie.IT, betrag=Decimal("2000")),
            Investition(name="Werkzeug", kategorie=InvestitionKategorie.ANLAGEN, betrag=Decimal("3000")),
        ],
        anlaufkosten=Anlaufkosten(
            monate=6,
            monatliche_kosten=Decimal("4000"),
            reserve_percent=Decimal("25"),
        ),
        rechtsform="Einzelunternehmen",
    )


@pytest.fixture
def bankkredit():
    return Finanzierungsquelle(
        typ=FinanzierungsquelleTyp.BANKKREDIT,
        bezeichnung="Hausbank",
        betrag=Decimal("20000"),
        zinssatz=Decimal("4.5"),
        laufzeit=60,
    )


@pytest.fixture
def quellen(bankkredit):
    return [
        Finanzierungsquelle(
            typ=FinanzierungsquelleTyp.EIGENKAPITAL,
            bezeichnung="Ersparnisse",
            betrag=Decimal("20500"),
        ),
        bankkredit,
    ]


@pytest.fixture
def privatentnahme_input():
    """1.900 € per month."""
    return Privatentnahme(
        miete=Decimal("700"),
        lebensmittel=Decimal("350"),
        versicherungen=Decimal("400"),
        mobilitaet=Decimal("150"),
        kommunikation=Decimal("50"),
        sonstige_ausgaben=Decimal("150"),
        sparrate=Decimal("100"),
    )


@pytest.fixture
def umsatzplanung():
    return Umsatzplanung(
        umsatz_jahr1=[
            Decimal(v) for v in
            ("3000", "4000", "5000", "6000", "7000", "8000",
             "9000", "10000", "10000", "10000", "10000", "10000")
        ],
        umsatz_jahr2=Decimal("140000"),
        umsatz_jahr3=Decimal("170000"),
    )


@pytest.fixture
def kostenplanung():
    """3.000 € fixed costs per month, material at 10 % of revenue."""
    return Kostenplanung(
        fixkosten_monatlich=Decimal("3000"),
        materialaufwand_jahr1=Decimal("9200"),
        materialaufwand_jahr2=Decimal("14000"),
        materialaufwand_jahr3=Decimal("17000"),
    )


@pytest.fixture
def gz_plan():
    """1.500 € in months 1-6, 300 € afterwards."""
    return GruendungszuschussPlan(alg1_monatlich=Decimal("1200"))


# =============================================================================
# Snapshot
# =============================================================================

@pytest.fixture
def snapshot(
    kapitalbedarf_input, quellen, privatentnahme_input, umsatzplanung, kostenplanung, gz_plan
):
    return FinanzplanSnapshot(
        kapitalbedarf=kapitalbedarf_input,
        finanzierung=FinanzierungInput(quellen=quellen),
        privatentnahme=privatentnahme_input,
        umsatzplanung=umsatzplanung,
        kostenplanung=kostenplanung,
        industry="beratung",
        saisonalitaet="default",
        region="Berlin",
        gruendungszuschuss=gz_plan,
    )


@pytest.fixture
def snapshot_payload():
    """The same plan as it arrives over the wire (camelCase, JSON numbers)."""
    return {
        "kapitalbedarf": {
            "gruendungskosten": {
                "notar": 800, "handelsregister": 400, "beratung": 1500,
                "marketing": 2000, "sonstige": 800,
            },
            "investitionen": [
                {"name": "Laptop", "kategorie": "it", "betrag": 2000},
                {"name": "Werkzeug", "kategorie": "anlagen", "betrag": 3000},
            ],
            "anlaufkosten": {"monate": 6, "monatlicheKosten": 4000, "reservePercent": 25},
            "rechtsform": "Einzelunternehmen",
        },
        "finanzierung": {
            "quellen": [
                {"typ": "eigenkapital", "bezeichnung": "Ersparnisse", "betrag": 20500},
                {
                    "typ": "bankkredit", "bezeichnung": "Hausbank", "betrag": 20000,
                    "zinssatz": 4.5, "laufzeit": 60,
                },
            ],
        },
        "privatentnahme": {
            "miete": 700, "lebensmittel": 350, "versicherungen": 400, "mobilitaet": 150,
            "kommunikation": 50, "sonstigeAusgaben": 150, "sparrate": 100,
        },
        "umsatzplanung": {
            "umsatzJahr1": [3000, 4000, 5000, 6000, 7000, 8000,
                            9000, 10000, 10000, 10000, 10000, 10000],
            "umsatzJahr2": 140000,
            "umsatzJahr3": 170000,
        },
        "kostenplanung": {
            "fixkostenMonatlich": 3000,
            "materialaufwandJahr1": 9200,
            "materialaufwandJahr2": 14000,
            "materialaufwandJahr3": 17000,
        },
        "industry": "beratung",
        "saisonalitaet": "default",
        "region": "Berlin",
        "gruendungszuschuss": {"alg1Monatlich": 1200},
    }
