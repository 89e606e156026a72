TERMS = [
    {"domain": "wine_type", "key": "red", "label_en": "Red", "label_it": "Rosso"},
    {"domain": "wine_type", "key": "white", "label_en": "White", "label_it": "Bianco"},
    {"domain": "wine_type", "key": "rose", "label_en": "Rose", "label_it": "Rosato"},
    {"domain": "wine_type", "key": "sparkling", "label_en": "Sparkling", "label_it": "Bollicine"},
    {"domain": "wine_type", "key": "dessert", "label_en": "Dessert", "label_it": "Dessert"},
]
