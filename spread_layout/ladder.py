"""
Build a Ladder (a placeable sidebar or flow) from an SVG sub-document.
"""

# Standard Library
import dataclasses
import json
import logging
import re

# local repo modules
import spread_layout as spl
import spread_layout.config
import spread_layout.errors
import spread_layout.geometry
import spread_layout.layout
import spread_layout.svg_lib


Dim = spl.geometry.Dim
Point = spl.geometry.Point
Rect = spl.geometry.Rect
LayerRole = spl.svg_lib.LayerRole
SourceBox = spl.svg_lib.SourceBox
PrefillDecodeError = spl.errors.PrefillDecodeError
flip_y = spl.geometry.flip_y
resolve_reference_anchor = spl.layout.resolve_reference_anchor

DEFAULT_FONT_REGULAR = spl.config.DEFAULT_FONT_REGULAR
DEFAULT_TEXT_SIZE = spl.config.DEFAULT_TEXT_SIZE
DEFAULT_LINE_HEIGHT_FACTOR = spl.config.DEFAULT_LINE_HEIGHT_FACTOR
DEFAULT_ALIGNMENT = spl.config.DEFAULT_ALIGNMENT
PARAGRAPH_ALIGNMENTS = spl.config.PARAGRAPH_ALIGNMENTS
MULTILINE_MARKER = spl.config.MULTILINE_MARKER

TAB_SEQUENCE_RE = re.compile(spl.config.TAB_SEQUENCE_PATTERN, re.IGNORECASE)

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class Margins:
	left: float = 0.0
	right: float = 0.0
	top: float = 0.0
	bottom: float = 0.0


@dataclasses.dataclass(frozen=True)
class Paragraph:
	text: str = ""
	font: str = DEFAULT_FONT_REGULAR
	size: float = DEFAULT_TEXT_SIZE
	line_height: float = DEFAULT_TEXT_SIZE * DEFAULT_LINE_HEIGHT_FACTOR
	alignment: str = DEFAULT_ALIGNMENT
	wrap: bool = False
	wrap_width: float = 0.0
	angle: float = 0.0
	margins: Margins = dataclasses.field(default_factory=Margins)
	absolute_positioning: bool = False
	color: tuple[float, float, float] = (0.0, 0.0, 0.0)


@dataclasses.dataclass(frozen=True)
class TextField:
	id: str
	rect: Rect
	prefill_literal: str = ""
	tab_sequence: int = 0
	multiline: bool = False


@dataclasses.dataclass(frozen=True)
class TextPrefill:
	id: str
	rect: Rect
	paragraph: Paragraph = dataclasses.field(default_factory=Paragraph)


@dataclasses.dataclass(frozen=True)
class Ladder:
	id: str
	dim: Dim
	reference_anchor: Point
	text_fields: list[TextField]
	text_prefills: list[TextPrefill]


#============================================
def parse_tab_sequence(element_id: str) -> int:
	"""
	Read the tab order from an element id like "rect-tab-03".

	Args:
		element_id: SVG id attribute.

	Returns:
		Tab sequence, 0 when the id has no tab marker.
	"""
	match = TAB_SEQUENCE_RE.search(element_id or "")
	if match is None:
		return 0
	return int(match.group(1))


#============================================
def _number(descriptor: dict, key: str, default: float) -> float:
	value = descriptor.get(key, default)
	if isinstance(value, bool) or not isinstance(value, (int, float)):
		raise PrefillDecodeError(f"paragraph {key} must be a number, got {value!r}")
	return float(value)


#============================================
def _flag(descriptor: dict, key: str, default: bool) -> bool:
	value = descriptor.get(key, default)
	if not isinstance(value, bool):
		raise PrefillDecodeError(f"paragraph {key} must be true or false, got {value!r}")
	return value


#============================================
def parse_color(value) -> tuple[float, float, float]:
	"""
	Parse a descriptor color into RGB floats.

	Args:
		value: "#rrggbb" string or {"r", "g", "b"} mapping with 0.0-1.0 values.

	Returns:
		Tuple of (r, g, b).
	"""
	if isinstance(value, str):
		if not value.startswith("#") or len(value) != 7:
			raise PrefillDecodeError(f"color {value!r} is not #rrggbb")
		try:
			red = int(value[1:3], 16) / 255.0
			green = int(value[3:5], 16) / 255.0
			blue = int(value[5:7], 16) / 255.0
		except ValueError as error:
			raise PrefillDecodeError(f"color {value!r} is not #rrggbb") from error
		return (red, green, blue)
	if isinstance(value, dict):
		channels = tuple(_number(value, key, 0.0) for key in ("r", "g", "b"))
		for channel in channels:
			if not 0.0 <= channel <= 1.0:
				raise PrefillDecodeError(f"color channel {channel} outside 0.0-1.0")
		return channels
	raise PrefillDecodeError(f"color must be a string or mapping, got {value!r}")


#============================================
def decode_paragraph(description: str) -> Paragraph:
	"""
	Decode a prefill box description into a Paragraph.

	The description is a JSON object, for example
	{"text": "Marker", "size": 14, "alignment": "center"}.

	Args:
		description: Description text of the prefill box.

	Returns:
		Paragraph.
	"""
	try:
		descriptor = json.loads(description)
	except json.JSONDecodeError as error:
		raise PrefillDecodeError(f"prefill description is not JSON: {error}") from error
	if not isinstance(descriptor, dict):
		raise PrefillDecodeError("prefill description must be a JSON object")

	text = descriptor.get("text", "")
	font = descriptor.get("font", DEFAULT_FONT_REGULAR)
	alignment = descriptor.get("alignment", DEFAULT_ALIGNMENT)
	if not isinstance(text, str) or not isinstance(font, str) or not isinstance(alignment, str):
		raise PrefillDecodeError("paragraph text, font and alignment must be strings")
	alignment = alignment.lower()
	if alignment not in PARAGRAPH_ALIGNMENTS:
		raise PrefillDecodeError(f"unknown paragraph alignment {alignment!r}")

	size = _number(descriptor, "size", DEFAULT_TEXT_SIZE)
	line_height = _number(descriptor, "lineHeight", size * DEFAULT_LINE_HEIGHT_FACTOR)

	margins_value = descriptor.get("margins", {})
	if not isinstance(margins_value, dict):
		raise PrefillDecodeError("paragraph margins must be a mapping")
	margins = Margins(
		left=_number(margins_value, "left", 0.0),
		right=_number(margins_value, "right", 0.0),
		top=_number(margins_value, "top", 0.0),
		bottom=_number(margins_value, "bottom", 0.0),
	)

	color = (0.0, 0.0, 0.0)
	if "color" in descriptor:
		color = parse_color(descriptor["color"])

	return Paragraph(
		text=text,
		font=font,
		size=size,
		line_height=line_height,
		alignment=alignment,
		wrap=_flag(descriptor, "wrap", False),
		wrap_width=_number(descriptor, "wrapWidth", 0.0),
		angle=_number(descriptor, "angle", 0.0),
		margins=margins,
		absolute_positioning=_flag(descriptor, "absolute", False),
		color=color,
	)


#============================================
def box_rect(box: SourceBox, scale: float, reference_y: float, height: float) -> Rect:
	"""
	Convert a raw box into a Rect with its lower-left corner in the output frame.

	Args:
		box: Raw box in document units.
		scale: Document scale factor.
		reference_y: Scaled y of the reference anchor.
		height: Document height in points.

	Returns:
		Rect.
	"""
	width = box.width * scale
	box_height = box.height * scale
	bottom = (box.y + box.height) * scale
	corner = Point(box.x * scale, flip_y(bottom, height - reference_y))
	return Rect(corner, Dim(width, box_height))


#============================================
def build_ladder(svg_bytes: bytes) -> Ladder:
	"""
	Parse an SVG sub-document into a Ladder.

	Args:
		svg_bytes: Raw SVG bytes.

	Returns:
		Ladder with text fields sorted by tab sequence.
	"""
	root = spl.svg_lib.parse_svg(svg_bytes)
	ladder_id = spl.svg_lib.document_title(root)
	width, height = spl.svg_lib.document_size(root)
	scale = spl.geometry.document_scale_factor(spl.svg_lib.document_unit(root))

	reference = resolve_reference_anchor(spl.svg_lib.read_layer_points(root, LayerRole.ANCHORS))
	reference_x = 0.0
	reference_y = 0.0
	if reference is not None:
		reference_x = reference.x * scale
		reference_y = reference.y * scale
	reference_anchor = Point(reference_x, flip_y(reference_y, height - reference_y))

	text_fields: list[TextField] = []
	for box in spl.svg_lib.read_layer_boxes(root, LayerRole.TEXTFIELDS):
		if box.title is None:
			logger.warning("textfield box %r has no title, so ignoring", box.element_id)
			continue
		multiline = MULTILINE_MARKER in box.element_id.lower() or MULTILINE_MARKER in box.title.lower()
		text_fields.append(
			TextField(
				id=box.title,
				rect=box_rect(box, scale, reference_y, height),
				prefill_literal=box.description or "",
				tab_sequence=parse_tab_sequence(box.element_id),
				multiline=multiline,
			)
		)
	# sorted() is stable, so equal tab sequences keep document order
	text_fields = sorted(text_fields, key=lambda item: item.tab_sequence)

	text_prefills: list[TextPrefill] = []
	for box in spl.svg_lib.read_layer_boxes(root, LayerRole.PREFILLS):
		if box.title is None:
			logger.warning("prefill box %r has no title, so ignoring", box.element_id)
			continue
		paragraph = Paragraph()
		if box.description is not None:
			paragraph = decode_paragraph(box.description)
		text_prefills.append(
			TextPrefill(
				id=box.title,
				rect=box_rect(box, scale, reference_y, height),
				paragraph=paragraph,
			)
		)

	logger.debug(
		"ladder %r: %d text fields, %d prefills",
		ladder_id,
		len(text_fields),
		len(text_prefills),
	)
	return Ladder(
		id=ladder_id,
		dim=Dim(width, height),
		reference_anchor=reference_anchor,
		text_fields=text_fields,
		text_prefills=text_prefills,
	)
