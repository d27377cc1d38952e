"""
Compose a Layout and its Ladders into one print-ready Spread.
"""

# Standard Library
import dataclasses
import logging

# local repo modules
import spread_layout as spl
import spread_layout.config
import spread_layout.errors
import spread_layout.geometry
import spread_layout.ladder
import spread_layout.layout


Axis = spl.geometry.Axis
Dim = spl.geometry.Dim
Point = spl.geometry.Point
Layout = spl.layout.Layout
Ladder = spl.ladder.Ladder
TextField = spl.ladder.TextField
TextPrefill = spl.ladder.TextPrefill

NoPageSizeError = spl.errors.NoPageSizeError
MissingImageSizeError = spl.errors.MissingImageSizeError
AxisMismatchError = spl.errors.AxisMismatchError
MissingLadderError = spl.errors.MissingLadderError
MissingPreviousImageError = spl.errors.MissingPreviousImageError

LADDER_PREFIX = spl.config.LADDER_PREFIX
PREVIOUS_IMAGE_ANCHOR_PREFIX = spl.config.PREVIOUS_IMAGE_ANCHOR_PREFIX
PREVIOUS_IMAGE_SIZE_PREFIX = spl.config.PREVIOUS_IMAGE_SIZE_PREFIX
LADDER_CHROME_SUFFIX = spl.config.LADDER_CHROME_SUFFIX
IMAGE_SUFFIX = spl.config.IMAGE_SUFFIX

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class ImageInsert:
	filename: str
	corner: Point
	size: Dim

	def shifted(self, axis: Axis, amount: float) -> "ImageInsert":
		return ImageInsert(self.filename, self.corner.shifted(axis, amount), self.size)


@dataclasses.dataclass(frozen=True)
class Spread:
	name: str
	dim: Dim
	extra_along_dynamic_axis: float
	dynamic_axis: Axis | None
	images: list[ImageInsert]
	text_fields: list[TextField]
	text_prefills: list[TextPrefill]
	previous_image: ImageInsert | None = None


@dataclasses.dataclass(frozen=True)
class PageResolution:
	"""
	Page size after the first resolution step.

	When deferred is True the dynamic axis still waits for the measured
	previous-stage image, and delta holds the page's own contribution.
	"""
	dim: Dim
	dynamic_axis: Axis | None = None
	extra: float = 0.0
	deferred: bool = False
	delta: float = 0.0


#============================================
def pick_key(keys: list[str], spread_name: str) -> str | None:
	"""
	Choose one map key among those that mention a spread.

	Args:
		keys: Candidate keys, each containing the spread name.
		spread_name: Spread being composed.

	Returns:
		Chosen key, or None when there are no candidates.
	"""
	if not keys:
		return None
	if spread_name in keys:
		return spread_name
	ordered = sorted(keys)
	if len(ordered) > 1:
		logger.warning(
			"spread %r matches several entries %s, using %r",
			spread_name,
			ordered,
			ordered[0],
		)
	return ordered[0]


#============================================
def find_size_entry(
	size_maps: tuple[dict[str, Dim], ...],
	spread_name: str,
	preferred: tuple[str, ...],
	excluded: dict[str, str] | None = None,
) -> tuple[str, Dim] | None:
	"""
	Look up one size entry for a spread across several size maps.

	Preferred keys win in any map before partial matches are considered.
	Among partial matches the earlier map wins.

	Args:
		size_maps: Size maps in priority order, dynamic before static.
		spread_name: Spread being composed.
		preferred: Exact keys that win outright, in order.
		excluded: Keys that must never match.

	Returns:
		Tuple of (key, Dim), or None when nothing matches.
	"""
	if excluded is None:
		excluded = {}
	for key in preferred:
		if key in excluded:
			continue
		for sizes in size_maps:
			if key in sizes:
				return (key, sizes[key])
	for sizes in size_maps:
		keys = [key for key in sizes if spread_name in key and key not in excluded]
		key = pick_key(keys, spread_name)
		if key is not None:
			return (key, sizes[key])
	return None


#============================================
def _check_single_axis(dim: Dim, what: str) -> None:
	if dim.width_is_dynamic and dim.height_is_dynamic:
		raise AxisMismatchError(f"{what} declares both axes dynamic")


#============================================
def find_page_size(layout: Layout, spread_name: str) -> Dim:
	"""
	Look up the page size entry for a spread.

	An exact key wins in either map. Otherwise a dynamic partial match
	wins over a static one.

	Args:
		layout: Parsed layout.
		spread_name: Spread being composed.

	Returns:
		Page Dim, carrying its dynamic flag.
	"""
	entry = find_size_entry(
		(layout.page_sizes_dynamic, layout.page_sizes_static),
		spread_name,
		(spread_name,),
	)
	if entry is None:
		raise NoPageSizeError(f"no page size entry for spread {spread_name!r}")
	key, page = entry
	_check_single_axis(page, f"page size {key!r}")
	return page


#============================================
def find_previous_image_size(layout: Layout, spread_name: str) -> Dim | None:
	"""
	Look up the size entry that frames the previous-stage image.

	Image sizes with a filename belong to decorative images, so only the
	entries without one are considered here.

	Args:
		layout: Parsed layout.
		spread_name: Spread being composed.

	Returns:
		Image Dim, or None when the layout has no such entry.
	"""
	entry = find_size_entry(
		(layout.image_sizes_dynamic, layout.image_sizes_static),
		spread_name,
		(PREVIOUS_IMAGE_SIZE_PREFIX + spread_name, spread_name),
		layout.filenames,
	)
	if entry is None:
		return None
	key, image = entry
	_check_single_axis(image, f"image size {key!r}")
	return image


#============================================
def resolve_page_dim(page: Dim, image: Dim | None) -> PageResolution:
	"""
	Resolve the page size from the page entry and the previous-image entry.

	Args:
		page: Page size entry.
		image: Previous-stage image size entry, or None.

	Returns:
		PageResolution.
	"""
	page_axis = page.dynamic_axis
	image_axis = None
	if image is not None:
		image_axis = image.dynamic_axis

	if not page.is_dynamic:
		if image_axis is not None:
			raise AxisMismatchError(
				f"static page cannot follow an image dynamic on {image_axis.value}"
			)
		return PageResolution(dim=page.static())

	if image is not None and image_axis is None:
		# reduced information: the image entry fixes the dynamic axis now
		extra = image.along(page_axis)
		final = page.with_value(page_axis, page.along(page_axis) + extra).static()
		return PageResolution(dim=final, dynamic_axis=page_axis, extra=extra)

	if image_axis is not None and image_axis is not page_axis:
		raise AxisMismatchError(
			f"page is dynamic on {page_axis.value} but the image is dynamic on {image_axis.value}"
		)
	return PageResolution(
		dim=page.static(),
		dynamic_axis=page_axis,
		deferred=True,
		delta=page.along(page_axis),
	)


#============================================
def place_ladders(
	layout: Layout,
	spread_name: str,
	ladders: dict[str, Ladder],
) -> tuple[list[ImageInsert], list[TextField], list[TextPrefill]]:
	"""
	Position every ladder of a spread at its anchor.

	Args:
		layout: Parsed layout.
		spread_name: Spread being composed.
		ladders: Parsed ladders keyed by their layout anchor name.

	Returns:
		Tuple of (chrome images, text fields, text prefills).
	"""
	images: list[ImageInsert] = []
	text_fields: list[TextField] = []
	text_prefills: list[TextPrefill] = []
	keys = sorted(
		key for key in layout.filenames
		if key.startswith(LADDER_PREFIX) and spread_name in key
	)
	for key in keys:
		ladder = ladders.get(key)
		if ladder is None:
			raise MissingLadderError(f"spread {spread_name!r} needs ladder {key!r}")
		offset = layout.anchors.get(key, layout.origin)
		chrome = layout.filenames[key] + LADDER_CHROME_SUFFIX
		images.append(ImageInsert(chrome, offset, ladder.dim.static()))
		for field in ladder.text_fields:
			text_fields.append(dataclasses.replace(field, rect=field.rect.translated(offset)))
		for prefill in ladder.text_prefills:
			text_prefills.append(dataclasses.replace(prefill, rect=prefill.rect.translated(offset)))
		logger.debug("placed ladder %r at (%f,%f)", key, offset.x, offset.y)
	return (images, text_fields, text_prefills)


#============================================
def place_decorative_images(
	layout: Layout,
	spread_name: str,
	image_overrides: dict[str, str],
) -> list[ImageInsert]:
	"""
	Position the plain images of a spread.

	Args:
		layout: Parsed layout.
		spread_name: Spread being composed.
		image_overrides: Replacement filenames keyed by anchor name.

	Returns:
		List of ImageInsert entries in key order.
	"""
	images: list[ImageInsert] = []
	keys = sorted(
		key for key in layout.filenames
		if spread_name in key
		and not key.startswith(LADDER_PREFIX)
		and not key.startswith(PREVIOUS_IMAGE_ANCHOR_PREFIX)
	)
	for key in keys:
		size = layout.image_sizes_static.get(key)
		if size is None:
			raise MissingImageSizeError(f"image {key!r} has no static size entry")
		offset = layout.anchors.get(key, layout.origin)
		filename = image_overrides.get(key, layout.filenames[key]) + IMAGE_SUFFIX
		images.append(ImageInsert(filename, offset, size.static()))
	return images


#============================================
def compose_spread(
	layout: Layout,
	spread_name: str,
	ladders: dict[str, Ladder],
	previous_image_size: tuple[float, float] | None = None,
	previous_image_filename: str = "",
	image_overrides: dict[str, str] | None = None,
) -> Spread:
	"""
	Compose one spread from a layout, its ladders and the previous-stage image.

	Args:
		layout: Parsed layout.
		spread_name: Spread to compose.
		ladders: Parsed ladders keyed by their layout anchor name.
		previous_image_size: Measured (width, height) of the previous-stage
			image in points, or None.
		previous_image_filename: File of the previous-stage image.
		image_overrides: Replacement filenames for decorative images.

	Returns:
		Spread with every coordinate in the output frame.
	"""
	if image_overrides is None:
		image_overrides = {}

	page = find_page_size(layout, spread_name)
	image_entry = find_previous_image_size(layout, spread_name)
	resolution = resolve_page_dim(page, image_entry)
	final = resolution.dim
	extra = resolution.extra
	axis = resolution.dynamic_axis

	images, text_fields, text_prefills = place_ladders(layout, spread_name, ladders)
	images.extend(place_decorative_images(layout, spread_name, image_overrides))

	previous_image = None
	corner = layout.anchors.get(PREVIOUS_IMAGE_ANCHOR_PREFIX + spread_name, layout.origin)
	if resolution.deferred:
		if previous_image_size is None:
			raise MissingPreviousImageError(
				f"spread {spread_name!r} is dynamic on {axis.value} but no previous image was measured"
			)
		fixed_axis = axis.other
		# the image never overflows the page on the fixed axis
		fixed_extent = final.along(fixed_axis)
		if image_entry is not None and 0.0 < image_entry.along(fixed_axis) < fixed_extent:
			fixed_extent = image_entry.along(fixed_axis)
		scaled = Dim(*spl.geometry.scale_to_axis(previous_image_size, fixed_axis, fixed_extent))
		extra = scaled.along(axis)
		final = final.with_value(axis, extra + resolution.delta)
		previous_image = ImageInsert(previous_image_filename, corner, scaled)
	elif previous_image_size is not None:
		box = final
		if image_entry is not None:
			box = image_entry
		scaled = Dim(*spl.geometry.fit_within(previous_image_size, box.width, box.height))
		previous_image = ImageInsert(previous_image_filename, corner, scaled)

	if axis is not None and extra > 0.0:
		images = [item.shifted(axis, extra) for item in images]
		text_fields = [dataclasses.replace(item, rect=item.rect.shifted(axis, extra)) for item in text_fields]
		text_prefills = [dataclasses.replace(item, rect=item.rect.shifted(axis, extra)) for item in text_prefills]

	logger.debug(
		"spread %r: %.2fx%.2f, extra %.2f, %d images, %d fields",
		spread_name,
		final.width,
		final.height,
		extra,
		len(images),
		len(text_fields),
	)
	return Spread(
		name=spread_name,
		dim=final,
		extra_along_dynamic_axis=extra,
		dynamic_axis=axis,
		images=images,
		text_fields=text_fields,
		text_prefills=text_prefills,
		previous_image=previous_image,
	)
