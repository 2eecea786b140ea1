"""Constants for the DVF Île-de-France explorer."""

# Choropleth palette, lowest price (green) to highest (red)
HEAT_PALETTE = [
    "#006400",
    "#1e8f3a",
    "#6cc04a",
    "#b6e43a",
    "#ffd700",
    "#ffb000",
    "#ff8c00",
    "#ff3b1f",
    "#8b0000",
]
NEUTRAL_COLOR = "#cccccc"  # Territories without a known price
QUANTILE_BUCKETS = 9  # Produces QUANTILE_BUCKETS - 1 thresholds

# Transit accessibility
SERVING_RADIUS_M = 1000.0  # Stops this close to the zone centroid serve it
FALLBACK_LINE_COLOR = "#999999"
EARTH_RADIUS_M = 6371008.8  # Mean Earth radius

# Session limits
MAX_COMPARISON_ZONES = 3
MIN_ZONES_TO_COMPARE = 2
DEFAULT_TOP_N = 5

# Geography
IDF_DEPARTMENTS = ["75", "77", "78", "91", "92", "93", "94", "95"]
SECTION_SUFFIX_LENGTH = 4  # Parcel id = section code + 4-char parcel number
DEPARTMENT_CODE_LENGTH = 2

# GeoJSON property names by territorial scale: (code, name)
TERRITORY_PROPERTIES = {
    "department": ("code_insee", "nom"),
    "commune": ("id", "nom"),
    "section": ("id", "code"),
}
SECTION_PARENT_PROPERTY = "commune"

# Default source files (see DataLoader)
DEFAULT_TRANSACTIONS_FILE = "dvf_idf_final.csv"
DEFAULT_TRANSIT_LINES_FILE = "transports_idf.csv"
DEFAULT_STOPS_FILE = "gares_idf.csv"
DEFAULT_DEPARTMENTS_FILE = "idf.geojson"
DEFAULT_COMMUNES_FILE = "communes_idf.geojson"
DEFAULT_SECTIONS_FILE = "sections_idf.geojson"
TRANSIT_CSV_SEPARATOR = ";"
