"""Built-in exemplar wines used when the model is unavailable."""

from __future__ import annotations

from divino.normalization.engine import IdIssuer, NormalizationEngine
from divino.schema import WineRecord

SAMPLE_WINES = [
    {
        "name": "Chianti Classico Gran Selezione",
        "winery": "Marchesi Antinori",
        "region": "Toscana",
        "country": "Italia",
        "year": "2019",
        "type": "Rosso",
        "averageRating": 4.3,
        "reviewCount": 2150,
        "priceEstimate": "45-55 €",
        "description": "Sangiovese austero e profondo, ciliegia matura, spezie dolci e tannino fitto.",
        "grapes": ["Sangiovese"],
        "foodPairing": ["Bistecca alla fiorentina", "Pecorino stagionato", "Cinghiale in umido"],
        "alcoholContent": "14%",
        "tasteProfile": {"bold": 75, "tannic": 70, "sweet": 5, "acidic": 65},
        "woodNote": "Rovere",
        "fruitNote": "Ciliegia",
        "earthNote": "Sottobosco",
    },
    {
        "name": "Barolo",
        "winery": "G.D. Vajra",
        "region": "Piemonte",
        "country": "Italia",
        "year": "2018",
        "type": "Rosso",
        "averageRating": 4.4,
        "reviewCount": 1830,
        "priceEstimate": "38-48 €",
        "description": "Nebbiolo elegante: rosa, catrame e lampone, con tannini vellutati e lunga chiusura.",
        "grapes": ["Nebbiolo"],
        "foodPairing": ["Tajarin al tartufo", "Brasato al Barolo", "Castelmagno"],
        "alcoholContent": "14.5%",
        "tasteProfile": {"bold": 80, "tannic": 85, "sweet": 5, "acidic": 70},
    },
    {
        "name": "Valdobbiadene Prosecco Superiore Brut",
        "winery": "Bisol",
        "region": "Veneto",
        "country": "Italia",
        "year": "NV",
        "type": "Bollicine",
        "averageRating": 3.9,
        "reviewCount": 940,
        "priceEstimate": "14-18 €",
        "description": "Perlage fine, mela verde e fiori di glicine, sorso fresco e sapido.",
        "grapes": ["Glera"],
        "foodPairing": ["Aperitivo", "Fritto di pesce", "Crudi di mare"],
        "alcoholContent": "11.5%",
        "tasteProfile": {"bold": 30, "tannic": 5, "sweet": 15, "acidic": 75},
    },
    {
        "name": "Etna Bianco",
        "winery": "Benanti",
        "region": "Sicilia",
        "country": "Italia",
        "year": "2022",
        "type": "Bianco",
        "averageRating": 4.0,
        "reviewCount": 610,
        "priceEstimate": "20-26 €",
        "description": "Carricante vulcanico, agrumi e pietra focaia, acidita tesa e finale salino.",
        "grapes": ["Carricante"],
        "foodPairing": ["Pesce spada alla griglia", "Pasta con le sarde", "Formaggi freschi"],
        "alcoholContent": "12.5%",
        "tasteProfile": {"bold": 45, "tannic": 5, "sweet": 5, "acidic": 80},
    },
]


def sample_wines(*, ids: IdIssuer | None = None, exclude_name: str | None = None) -> list[WineRecord]:
    """Return the sample catalogue with freshly issued ids."""

    items = SAMPLE_WINES
    if exclude_name:
        lowered = exclude_name.strip().lower()
        items = [item for item in items if item["name"].lower() != lowered]
    return NormalizationEngine(ids=ids).normalize_payload(items)
