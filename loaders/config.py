"""
Configuration constants for packing sheet loading.

This module centralizes all configuration parameters used during spreadsheet parsing,
making it easy to adjust the header vocabulary and patterns without touching core logic.
"""

# Header detection parameters
MAX_HEADER_SCAN_ROWS = 6  # Source files place the header within the first rows

# A row whose joined text contains any of these is taken as the header row
HEADER_MARKERS = [
    "company",
    "description",
    "s.no",
    "reference",
    "packing",
    "variety",
]

# Substring patterns per field role, matched against normalized header labels.
# Keys follow the positional fallback order: role i defaults to header column i.
FIELD_PATTERNS = {
    'ordinal': ["s.no", "sno", "s no", "sr.no", "sr no", "serial"],
    'date': ["date", "dt"],
    'party': ["company", "party", "supplier", "customer"],
    'reference': ["reference", "ref"],
    'description': ["description", "descrip", "descr", "desc", "variety", "item"],
    'packing': ["packing size", "packing", "pack", "size", "weight", "kg"],
    'quantity': ["quantity", "qty", "qnty"],
    'rate': ["rate"],
    'amount': ["amount", "amt", "total"],
}

# Usage sheets count consumption, not stock: "Total Bags" must not be read as bags used
USAGE_QUANTITY_PATTERNS = ["no of bags used", "bags used", "used"]
USAGE_FIELD_PATTERNS = dict(FIELD_PATTERNS, quantity=USAGE_QUANTITY_PATTERNS)

# Stripped from numeric cells before parsing (includes the mis-decoded rupee sign)
CURRENCY_SYMBOLS = ["â‚¹", "₹", "$", "€", "£", "¥", "Rs."]

# Upload handling
SUPPORTED_EXTENSIONS = ['.xlsx', '.xlsm', '.xls', '.csv']

# Session state lives in memory only
DATABASE_URL = 'sqlite://'
