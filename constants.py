# Named colours accepted by style profiles (lookup is case-insensitive)
NAMED_COLOURS = {
    "red": "#FF0000",
    "green": "#008000",
    "blue": "#0000FF",
    "black": "#000000",
    "white": "#FFFFFF",
    "gray": "#808080",
    "grey": "#808080",
    "orange": "#FFA500",
    "purple": "#800080",
    "yellow": "#FFFF00",
}

DEFAULT_FONT_COLOUR = "#000000"
DEFAULT_BACKGROUND_COLOUR = "#FFFFFF"

# Row style defaults
DEFAULT_ROW_FONT_SIZE = 10
DEFAULT_LINE_SPACING = 2
DEFAULT_UNDERLINE_WIDTH = 50
DEFAULT_UNDERLINE_THICKNESS = 0.75

# Style blocks outside the table rows: fontSize, fontStyle, paddingBottom
STYLE_BLOCK_DEFAULTS = {
    "header": (10, "normal", 10),
    "footer": (8, "normal", 0),
    "groupTitle": (10, "normal", 0),
    "groupMetadata": (10, "normal", 0),
    "labelRow": (10, "normal", 0),
    "keyInfo": (10, "normal", 0),
}

KEY_INFO_BOX_DEFAULTS = {
    "backgroundColour": "#F7F7F7",
    "borderColour": "#CCCCCC",
    "padding": 10,
    "marginBottom": 16,
}

FONT_STYLES = frozenset({"normal", "bold", "italic", "bolditalic"})

# Page geometry in points (A4 landscape)
DEFAULT_PAGE_WIDTH = 842
DEFAULT_PAGE_HEIGHT = 595
DEFAULT_MARGIN = 50
CELL_PADDING = 5
DEFAULT_LOGO_WIDTH = 36
DEFAULT_LOGO_HEIGHT = 44
HEADER_PADDING_BOTTOM = 10

# Grouping
GROUP_BY_DATE = "date"
GROUP_BY_TAG = "tagId"
GROUP_BY_LOCATION = "locationId"
GROUP_BY_FIELDS = {
    GROUP_BY_DATE: ("date", None),
    GROUP_BY_TAG: ("tagIds", "tags"),
    GROUP_BY_LOCATION: ("locationIds", "locations"),
}

DEFAULT_DATE_ENTRY_SORT = ["time:asc", "description:asc"]
DEFAULT_ENTRY_SORT = ["date:asc", "time:asc", "description:asc"]

# Snapshot filter dimensions: (filter key on the snapshot, id-array field on the entry)
FILTER_DIMENSIONS = (
    ("filterTagIds", "tagIds"),
    ("filterLocationIds", "locationIds"),
    ("filterSubLocationIds", "subLocationIds"),
)

# Metadata buckets that may hold per-date group metadata
DATE_META_BUCKETS = ("date", "dates", "scheduleDetail")

# Home page
DEFAULT_HOME_GROUP = "Other"
DEFAULT_COMPANY = "Other"

# Cache-Control headers for uploaded artifacts
CACHE_IMMUTABLE = "public, max-age=31536000, immutable"
CACHE_NO_STORE = "public, max-age=0, must-revalidate"

# API actions
ACTION_VERSION = "version"
ACTION_GENERATE_HOME = "generateHome"
SUPPORTED_ACTIONS = frozenset({ACTION_VERSION, ACTION_GENERATE_HOME})
