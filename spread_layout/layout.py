"""
Build a Layout from an SVG layout drawing.
"""

# Standard Library
import dataclasses
import logging

# local repo modules
import spread_layout as spl
import spread_layout.config
import spread_layout.geometry
import spread_layout.svg_lib


Dim = spl.geometry.Dim
Point = spl.geometry.Point
Axis = spl.geometry.Axis
LayerRole = spl.svg_lib.LayerRole
SourcePoint = spl.svg_lib.SourcePoint
SourceBox = spl.svg_lib.SourceBox
classify_name = spl.svg_lib.classify_name
flip_y = spl.geometry.flip_y

ANCHOR_REFERENCE = spl.config.ANCHOR_REFERENCE

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class Layout:
	id: str
	dim: Dim
	reference_anchor: Point
	anchors: dict[str, Point]
	page_sizes_static: dict[str, Dim]
	page_sizes_dynamic: dict[str, Dim]
	image_sizes_static: dict[str, Dim]
	image_sizes_dynamic: dict[str, Dim]
	filenames: dict[str, str]
	# lower-left page corner in the anchor frame, where anchorless content goes
	origin: Point = dataclasses.field(default_factory=Point)


#============================================
def resolve_reference_anchor(points: list[SourcePoint]) -> SourcePoint | None:
	"""
	Find the reserved reference anchor among the anchor points.

	Args:
		points: Anchor layer points.

	Returns:
		The last point titled with the reserved name, or None.
	"""
	reference = None
	for point in points:
		if point.title == ANCHOR_REFERENCE:
			reference = point
	return reference


#============================================
def flip_point(x: float, y: float, scale: float, reference_y: float, height: float) -> Point:
	"""
	Scale a raw point to points and flip it to a bottom-left origin.

	Args:
		x: Raw x in document units.
		y: Raw y in document units, measured downwards.
		scale: Document scale factor.
		reference_y: Scaled y of the reference anchor.
		height: Document height in points.

	Returns:
		Point in the output frame.
	"""
	return Point(x * scale, flip_y(y * scale, height - reference_y))


#============================================
def collect_sizes(
	boxes: list[SourceBox],
	role: LayerRole,
	scale: float,
) -> tuple[dict[str, Dim], dict[str, Dim]]:
	"""
	Sort titled page or image boxes into static and dynamic size maps.

	Args:
		boxes: Boxes read from the layer.
		role: LayerRole.PAGES or LayerRole.IMAGES.
		scale: Document scale factor.

	Returns:
		Tuple of (static_sizes, dynamic_sizes).
	"""
	static_sizes: dict[str, Dim] = {}
	dynamic_sizes: dict[str, Dim] = {}
	for box in boxes:
		if box.title is None:
			logger.warning(
				"%s box with size (%f,%f) has no title, so ignoring",
				role.value,
				box.width,
				box.height,
			)
			continue
		name_class = classify_name(role, box.title)
		if not name_class.name:
			logger.warning("%s box titled %r has no name after its prefix, so ignoring", role.value, box.title)
			continue
		dim = Dim(
			box.width * scale,
			box.height * scale,
			width_is_dynamic=name_class.axis is Axis.WIDTH,
			height_is_dynamic=name_class.axis is Axis.HEIGHT,
		)
		if name_class.is_dynamic:
			dynamic_sizes[name_class.name] = dim
		else:
			static_sizes[name_class.name] = dim
		logger.debug("%s size %s -> %s", role.value, box.title, dim)
	return (static_sizes, dynamic_sizes)


#============================================
def build_layout(svg_bytes: bytes) -> Layout:
	"""
	Parse an SVG layout drawing into a Layout.

	Anchors, page sizes and image sizes are scaled to points. Anchors
	are then flipped so y grows upwards from the bottom of the page.

	Args:
		svg_bytes: Raw SVG bytes.

	Returns:
		Layout.
	"""
	root = spl.svg_lib.parse_svg(svg_bytes)
	layout_id = spl.svg_lib.document_title(root)
	width, height = spl.svg_lib.document_size(root)
	unit = spl.svg_lib.document_unit(root)
	scale = spl.geometry.document_scale_factor(unit)
	if unit is not None and unit not in spl.config.UNIT_POINTS:
		logger.warning("unknown document units %r, treating values as points", unit)

	points = spl.svg_lib.read_layer_points(root, LayerRole.ANCHORS)
	reference = resolve_reference_anchor(points)
	reference_x = 0.0
	reference_y = 0.0
	if reference is not None:
		reference_x = reference.x * scale
		reference_y = reference.y * scale

	anchors: dict[str, Point] = {}
	filenames: dict[str, str] = {}
	for point in points:
		if point.title is None:
			logger.warning("anchor at (%f,%f) has no title, so ignoring", point.x, point.y)
			continue
		if point.title == ANCHOR_REFERENCE:
			continue
		anchors[point.title] = flip_point(point.x, point.y, scale, reference_y, height)
		if point.description is not None:
			filenames[point.title] = point.description

	page_boxes = spl.svg_lib.read_layer_boxes(root, LayerRole.PAGES)
	page_static, page_dynamic = collect_sizes(page_boxes, LayerRole.PAGES, scale)
	image_boxes = spl.svg_lib.read_layer_boxes(root, LayerRole.IMAGES)
	image_static, image_dynamic = collect_sizes(image_boxes, LayerRole.IMAGES, scale)

	# the reference anchor goes through the same flip as every other anchor
	reference_anchor = Point(reference_x, flip_y(reference_y, height - reference_y))
	origin = flip_point(0.0, height, 1.0, reference_y, height)

	layout = Layout(
		id=layout_id,
		dim=Dim(width, height),
		reference_anchor=reference_anchor,
		anchors=anchors,
		page_sizes_static=page_static,
		page_sizes_dynamic=page_dynamic,
		image_sizes_static=image_static,
		image_sizes_dynamic=image_dynamic,
		filenames=filenames,
		origin=origin,
	)
	logger.debug(
		"layout %r: %d anchors, %d pages, %d images",
		layout_id,
		len(anchors),
		len(page_static) + len(page_dynamic),
		len(image_static) + len(image_dynamic),
	)
	return layout
