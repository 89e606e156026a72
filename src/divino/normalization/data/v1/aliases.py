# Matched as substrings of the accent-stripped, casefolded raw value.
# Lower priority wins when several aliases occur in the same string.
# Aliases found inside unrelated words ("rose" in prosecco, "dolce" in dolcetto) match whole words only.
_WHOLE_WORD = {"rose", "dolce", "port", "cava"}

_BY_KEY = {
    "red": (10, ["red", "rosso", "rouge", "tinto", "rotwein"]),
    "white": (20, ["white", "bianco", "blanc", "blanco", "weisswein", "weiss"]),
    "rose": (30, ["rose", "rosato", "rosado"]),
    "sparkling": (
        40,
        [
            "sparkling",
            "champagne",
            "prosecco",
            "bollicine",
            "spumante",
            "franciacorta",
            "metodo classico",
            "cremant",
            "cava",
            "sekt",
        ],
    ),
    "dessert": (
        50,
        [
            "dessert",
            "porto",
            "port",
            "port wine",
            "sherry",
            "passito",
            "vin santo",
            "dolce",
            "sauternes",
            "tokaji",
            "ice wine",
            "eiswein",
            "marsala",
        ],
    ),
}

ALIASES = [
    {
        "domain": "wine_type",
        "key": key,
        "alias": alias,
        "match_type": "word" if alias in _WHOLE_WORD else "contains",
        "priority": priority,
    }
    for key, (priority, aliases) in _BY_KEY.items()
    for alias in aliases
]
