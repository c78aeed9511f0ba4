"""Application-wide constants and configuration values.

Centralizes magic numbers and storage keys to avoid duplication.
"""

# ============== STORAGE KEYS ==============
CART_STORAGE_KEY = "dowslakers-cart"
TOKEN_STORAGE_KEY = "token"

# ============== BACKEND ==============
DEFAULT_API_URL = "http://localhost:5000/api"
HTTP_TIMEOUT_SECONDS = 20.0
DB_POOL_MIN_SIZE = 1
DB_POOL_MAX_SIZE = 5

# ============== CHECKOUT ==============
DEFAULT_DELIVERY_FEE = 3500  # flat fee, whole naira
CURRENCY_SYMBOL = "₦"

# ============== CUSTOM SEWING ==============
MEASUREMENT_FIELDS: tuple[str, ...] = (
    "chest",
    "shoulder",
    "arm_length",
    "waist",
    "hip",
    "length",
    "trouser_length",
    "thigh",
)

MEASUREMENT_LABELS: dict[str, str] = {
    "chest": "Chest (inches)",
    "shoulder": "Shoulder Width (inches)",
    "arm_length": "Arm Length (inches)",
    "waist": "Waist (inches)",
    "hip": "Hip (inches)",
    "length": "Outfit Length (inches)",
    "trouser_length": "Trouser Length (inches)",
    "thigh": "Thigh (inches)",
}

STANDARD_SIZES: tuple[str, ...] = ("S", "M", "L", "XL", "XXL", "XXXL")
DEFAULT_STANDARD_SIZE = "M"
CUSTOM_SIZE_MARKER = "custom"

# ============== VALIDATION ==============
MAX_NAME_LENGTH = 100
MAX_ADDRESS_LENGTH = 500
MAX_NOTES_LENGTH = 1000
MAX_MEASUREMENT_LENGTH = 20
