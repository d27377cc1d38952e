"""
Shared configuration and constants.
"""

import dataclasses


POINTS_PER_INCH = 72.0
MM_PER_INCH = 25.4
PIXELS_PER_INCH = 96.0
POINTS_PER_MM = POINTS_PER_INCH / MM_PER_INCH
POINTS_PER_PX = POINTS_PER_INCH / PIXELS_PER_INCH
POINTS_PER_PT = 1.0

UNIT_POINTS = {
	"mm": POINTS_PER_MM,
	"px": POINTS_PER_PX,
	"pt": POINTS_PER_PT,
	"in": POINTS_PER_INCH,
}

ANCHOR_REFERENCE = "ref-anchor"
LADDER_PREFIX = "svg-"
PREVIOUS_IMAGE_ANCHOR_PREFIX = "img-previous-"
PREVIOUS_IMAGE_SIZE_PREFIX = "previous-"

PAGE_DYNAMIC_WIDTH_PREFIX = "page-dynamic-width-"
PAGE_DYNAMIC_HEIGHT_PREFIX = "page-dynamic-height-"
PAGE_DYNAMIC_PREFIX = "page-dynamic-"
PAGE_STATIC_PREFIX = "page-static-"
PAGE_PREFIX = "page-"
IMAGE_DYNAMIC_WIDTH_PREFIX = "image-dynamic-width-"
IMAGE_DYNAMIC_HEIGHT_PREFIX = "image-dynamic-height-"
IMAGE_DYNAMIC_PREFIX = "image-dynamic-"
IMAGE_STATIC_PREFIX = "image-static-"
IMAGE_PREFIX = "image-"

TAB_SEQUENCE_PATTERN = r"tab-(\d+)"
MULTILINE_MARKER = "multiline"

LADDER_SOURCE_SUFFIX = ".svg"
LADDER_CHROME_SUFFIX = ".png"
IMAGE_SUFFIX = ".jpg"
FIELD_NAME_TEMPLATE = "page-{page:03d}-{field}"

DEFAULT_FONT_REGULAR = "Helvetica"
DEFAULT_TEXT_SIZE = 12.0
DEFAULT_LINE_HEIGHT_FACTOR = 1.2
DEFAULT_ALIGNMENT = "left"
PARAGRAPH_ALIGNMENTS = ("left", "center", "right", "justify")
DEFAULT_IMAGE_DPI = 72.0


@dataclasses.dataclass
class RenderConfig:
	compress_streams: bool
	merge_identical_objects: bool
	font_name: str
	field_border: bool
	field_font_size: float


@dataclasses.dataclass
class RenderResult:
	output_path: str
	page_width: float
	page_height: float
	images: int
	text_fields: int
	text_prefills: int


#============================================
def inches_to_points(value: float) -> float:
	"""
	Convert inches to points.

	Args:
		value: Inches value.

	Returns:
		Points value.
	"""
	return value * POINTS_PER_INCH
