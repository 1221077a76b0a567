"""Lookup tables used by the value normalizers."""

# unit spelling -> canonical unit
UNIT_SYNONYMS = {
    "kg": "kg", "kgs": "kg", "kilo": "kg", "kilos": "kg", "kilogram": "kg", "kilograms": "kg",
    "g": "g", "gm": "g", "gms": "g", "gram": "g", "grams": "g",
    "t": "t", "mt": "t", "ton": "t", "tons": "t", "tonne": "t", "tonnes": "t",
    "lb": "lb", "lbs": "lb", "pound": "lb", "pounds": "lb",
    "cbm": "cbm", "m3": "cbm", "m³": "cbm", "cubic meter": "cbm", "cubic meters": "cbm", "cubic metre": "cbm",
    "l": "l", "ltr": "l", "litre": "l", "liter": "l", "litres": "l", "liters": "l",
    "cft": "cft", "cuft": "cft", "cubic feet": "cft",
    "pcs": "pcs", "pc": "pcs", "piece": "pcs", "pieces": "pcs", "nos": "pcs", "no": "pcs",
    "pkg": "pkg", "pkgs": "pkg", "package": "pkg", "packages": "pkg",
    "ctn": "ctn", "ctns": "ctn", "carton": "ctn", "cartons": "ctn",
    "box": "box", "boxes": "box", "bx": "box",
    "plt": "plt", "pallet": "plt", "pallets": "plt",
    "ea": "ea", "each": "ea", "unit": "ea", "units": "ea", "item": "ea", "items": "ea",
}

# canonical unit -> (family, factor to the family base unit); count units have no family
UNIT_FAMILIES = {
    "kg": ("mass", 1.0),
    "g": ("mass", 0.001),
    "t": ("mass", 1000.0),
    "lb": ("mass", 0.45359237),
    "cbm": ("volume", 1.0),
    "l": ("volume", 0.001),
    "cft": ("volume", 0.0283168466),
}

# Units used when counting commercial packing vs carrier pieces
COMMERCIAL_COUNT_UNITS = {"box", "ctn", "pkg", "ea", "plt"}
SHIPPING_COUNT_UNITS = {"pcs"}

CURRENCY_SYMBOLS = {
    "$": "USD",
    "us$": "USD",
    "£": "GBP",
    "€": "EUR",
    "₹": "INR",
    "rs": "INR",
    "inr": "INR",
    "¥": "JPY",
}

KNOWN_CURRENCIES = {
    "USD", "EUR", "GBP", "INR", "JPY", "CNY", "AED", "SGD", "HKD", "CHF", "AUD", "CAD",
    "SAR", "MYR", "THB", "KRW", "SEK", "NOK", "DKK", "NZD", "ZAR", "BDT", "LKR",
}

# alias (lowercase) -> canonical country name
COUNTRY_ALIASES = {
    "india": "india", "in": "india", "bharat": "india",
    "united kingdom": "united kingdom", "uk": "united kingdom", "gb": "united kingdom",
    "great britain": "united kingdom", "england": "united kingdom",
    "united states": "united states", "united states of america": "united states", "usa": "united states",
    "us": "united states",
    "china": "china", "prc": "china", "people's republic of china": "china",
    "germany": "germany", "deutschland": "germany",
    "france": "france", "italy": "italy", "spain": "spain", "netherlands": "netherlands",
    "belgium": "belgium", "switzerland": "switzerland",
    "japan": "japan", "singapore": "singapore", "hong kong": "hong kong",
    "united arab emirates": "united arab emirates", "uae": "united arab emirates",
    "bangladesh": "bangladesh", "sri lanka": "sri lanka", "vietnam": "vietnam", "viet nam": "vietnam",
    "thailand": "thailand", "malaysia": "malaysia", "indonesia": "indonesia",
    "south korea": "south korea", "korea": "south korea",
    "australia": "australia", "canada": "canada", "mexico": "mexico", "brazil": "brazil",
    "turkey": "turkey", "türkiye": "turkey", "south africa": "south africa",
}

# Regions whose numeric dates read month first
MONTH_FIRST_REGIONS = {"US", "PH", "FM", "MH", "PW"}
