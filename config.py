"""Central configuration for PCB component detection and IC identification.

All tunable parameters are defined here with descriptive names.
Functions that accept an override take ``None`` to mean "use the value here".
"""

# =============================================================================
# COMPONENT DETECTION
# =============================================================================

# Model input size for the whole-board pass (width, height)
FULL_IMAGE_TARGET_DIMENSIONS = (960, 960)

# Model input size for each tile of the windowed pass (width, height)
WINDOW_TARGET_DIMENSIONS = (640, 640)

# Rows scoring at or below this class confidence are dropped
DETECTION_CONFIDENCE_THRESHOLD = 0.2

# Same-class boxes overlapping at least this much are treated as duplicates
NMS_IOU_THRESHOLD = 0.5

# Number of class-score channels in the OBB output tensor
# Channel layout is [x, y, w, h, class scores..., theta]
OBB_CLASS_COUNT = 2

# Boxes whose angle lies within this many radians of pi/2 get width/height swapped
OBB_ROTATION_TOLERANCE = 0.5

# Pixel size that one window should roughly cover in the windowed pass
# The board pipeline uses max(width, height) // WINDOW_PIXEL_SIZE windows per side
WINDOW_PIXEL_SIZE = 640

# ONNX exports of the two detector models
LARGE_ITEMS_MODEL_PATH = "detection/models/large_items.onnx"
SMALL_ITEMS_MODEL_PATH = "detection/models/small_items.onnx"

# Pixel scale applied when building the network input blob
DETECTOR_INPUT_SCALE = 1.0 / 255.0

# =============================================================================
# TEXT EXTRACTION PREPROCESSING
# =============================================================================

# Gaussian blur kernel size applied before thresholding (odd)
TEXT_BLUR_KERNEL_SIZE = 3

# Adaptive threshold window is max(width, height) // this divisor (forced odd)
TEXT_THRESHOLD_WINDOW_DIVISOR = 7

# Constant subtracted from the local mean by the adaptive threshold
TEXT_THRESHOLD_CONSTANT = 5

# Images darker than this mean brightness are inverted before thresholding
TEXT_DARK_BACKGROUND_MEAN = 127

# =============================================================================
# OCR
# =============================================================================

# EasyOCR languages used to read IC markings
OCR_LANGUAGES = ("en",)

# Run EasyOCR on the GPU when one is available
OCR_USE_GPU = False

# =============================================================================
# TEXT RESOLUTION
# =============================================================================

# OCR lines shorter than this are treated as noise
MIN_TEXT_LINE_LENGTH = 4

# Largest confusable-aware distance at which a word is taken as a manufacturer name
MANUFACTURER_MATCH_MAX_DISTANCE = 2

# Visually confusable character groups used by the similarity checks
SIMILAR_CHARACTER_GROUPS = (
    frozenset("B8"),
    frozenset("MHN"),
    frozenset("D0OQ"),
    frozenset("C0O"),
    frozenset("7Z2"),
    frozenset("I1|"),
    frozenset("S5"),
    frozenset("YVXW"),
)

# =============================================================================
# MANUFACTURE DATES
# =============================================================================

# Two-digit years from here up to 99 are read as 19xx
CENTURY_19_MIN_YEAR = 70

# Largest accepted week number in a date code
MAX_WEEK_NUMBER = 52

# =============================================================================
# PART LOOKUP
# =============================================================================

# A returned part number must be closer than this to the queried text
RESULT_MATCH_MAX_DISTANCE = 3

# Wildcard retries need strictly more characters than this
WILDCARD_MIN_LENGTH = 5

# Wildcard retries are skipped when more than this fraction is replaced
WILDCARD_MAX_REPLACEMENT_RATIO = 0.5

# Guessed and returned manufacturer first words must be closer than this
WILDCARD_MANUFACTURER_MAX_DISTANCE = 3

# Characters OCR tends to confuse, replaced by '?' in wildcard searches
WILDCARD_CHARACTERS = "8B0MX1IS5"

# =============================================================================
# NEXAR API
# =============================================================================

NEXAR_SEARCH_URL = "https://api.nexar.com/graphql/"

# Seconds before a parts search request is abandoned
NEXAR_REQUEST_TIMEOUT = 30

# Environment variable holding the Nexar access token (lookup is offline without it)
NEXAR_TOKEN_ENV = "NEXAR_ACCESS_TOKEN"
