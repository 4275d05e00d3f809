"""Core constants: search bounds, store table/column names, rate-limit channels.

Single source of truth for literal values shared by the normalizer,
repositories, and the HTTP layer.
"""

# Search term bounds (characters, after normalization)
MAX_TERM_LENGTH = 200
MIN_TERM_LENGTH = 2

# Result limit bounds
DEFAULT_RESULT_LIMIT = 10
MIN_RESULT_LIMIT = 1
MAX_RESULT_LIMIT = 50

# Shared deadline for the concurrent source queries (seconds)
DEFAULT_SEARCH_DEADLINE_SECONDS = 5.0

# Display caps for normalized result items
MAX_DISPLAY_TITLE_LENGTH = 200
MAX_BIO_LENGTH = 500
MAX_LOG_MESSAGE_LENGTH = 200

# Product rendering defaults
DEFAULT_CURRENCY_CODE = "USD"
DEFAULT_IMAGE_WIDTH = 400
DEFAULT_IMAGE_HEIGHT = 400
UNTITLED_LISTING = "Untitled Listing"
DEFAULT_IMAGE_ALT = "Product image"

# Store tables and columns
LISTINGS_TABLE = "listings"
LISTING_PHOTOS_TABLE = "listing_photos"
CREATORS_TABLE = "creators"

LISTING_SEARCH_COLUMNS = ("title", "story")
CREATOR_SEARCH_COLUMNS = ("handle", "display_name")

LISTING_PUBLIC_STATUS = "live"
REFERENCE_PHOTO_TYPE = "reference"

# Rate-limit channels (key prefix before the caller address)
CHANNEL_PREDICTIVE_SEARCH = "search-predictive"
CHANNEL_GENERAL_SEARCH = "search"
RATE_LIMIT_KEY_SEP = ":"
