"""
Geometry value types and numeric parsing helpers.
"""

# Standard Library
import dataclasses
import enum

# local repo modules
import spread_layout as spl
import spread_layout.config
import spread_layout.errors


UnitError = spl.errors.UnitError

UNIT_POINTS = spl.config.UNIT_POINTS


class Axis(enum.Enum):
	WIDTH = "width"
	HEIGHT = "height"

	@property
	def other(self) -> "Axis":
		if self is Axis.WIDTH:
			return Axis.HEIGHT
		return Axis.WIDTH


@dataclasses.dataclass(frozen=True)
class Point:
	x: float = 0.0
	y: float = 0.0

	def translated(self, offset: "Point") -> "Point":
		return Point(self.x + offset.x, self.y + offset.y)

	def shifted(self, axis: Axis, amount: float) -> "Point":
		if axis is Axis.WIDTH:
			return Point(self.x + amount, self.y)
		return Point(self.x, self.y + amount)


@dataclasses.dataclass(frozen=True)
class Dim:
	width: float = 0.0
	height: float = 0.0
	width_is_dynamic: bool = False
	height_is_dynamic: bool = False

	@property
	def dynamic_axis(self) -> Axis | None:
		"""
		Return the single dynamic axis, or None for a fully static Dim.
		"""
		if self.width_is_dynamic:
			return Axis.WIDTH
		if self.height_is_dynamic:
			return Axis.HEIGHT
		return None

	@property
	def is_dynamic(self) -> bool:
		return self.width_is_dynamic or self.height_is_dynamic

	def along(self, axis: Axis) -> float:
		if axis is Axis.WIDTH:
			return self.width
		return self.height

	def with_value(self, axis: Axis, value: float) -> "Dim":
		if axis is Axis.WIDTH:
			return dataclasses.replace(self, width=value)
		return dataclasses.replace(self, height=value)

	def static(self) -> "Dim":
		return Dim(self.width, self.height)


@dataclasses.dataclass(frozen=True)
class Rect:
	corner: Point = dataclasses.field(default_factory=Point)
	size: Dim = dataclasses.field(default_factory=Dim)

	def translated(self, offset: Point) -> "Rect":
		return Rect(self.corner.translated(offset), self.size)

	def shifted(self, axis: Axis, amount: float) -> "Rect":
		return Rect(self.corner.shifted(axis, amount), self.size)


#============================================
def parse_translate_offset(text: str | None) -> tuple[float, float]:
	"""
	Extract the offset of an SVG translate transform.

	Anything that is not a well formed translate gives (0, 0).

	Args:
		text: Transform attribute value like "translate(10,-5)".

	Returns:
		Tuple of (dx, dy).
	"""
	if not text:
		return (0.0, 0.0)
	start = text.find("translate")
	if start < 0:
		return (0.0, 0.0)
	open_index = text.find("(", start)
	if open_index < 0:
		return (0.0, 0.0)
	close_index = text.find(")", open_index)
	if close_index <= open_index + 1:
		return (0.0, 0.0)
	tokens = text[open_index + 1:close_index].replace(",", " ").split()
	if not tokens or len(tokens) > 2:
		return (0.0, 0.0)
	try:
		values = [float(token) for token in tokens]
	except ValueError:
		return (0.0, 0.0)
	if len(values) == 1:
		# SVG treats a missing ty as zero
		values.append(0.0)
	return (values[0], values[1])


#============================================
def parse_unit_value(value: str | None) -> float:
	"""
	Parse a unit-suffixed length into points.

	Args:
		value: String value like "210mm" or "8.5in".

	Returns:
		Length in points.
	"""
	if value is None:
		raise UnitError("missing unit value")
	text = value.strip()
	if len(text) < 3:
		raise UnitError(f"value {value!r} has no unit suffix")
	unit = text[-2:]
	number = text[:-2]
	if unit not in UNIT_POINTS:
		raise UnitError(f"unknown unit {unit!r} in {value!r}")
	try:
		number_value = float(number)
	except ValueError as error:
		raise UnitError(f"bad numeral {number!r} in {value!r}") from error
	return number_value * UNIT_POINTS[unit]


#============================================
def document_scale_factor(unit: str | None) -> float:
	"""
	Scale factor from declared document units to points.

	Args:
		unit: Declared document unit (mm, px, pt, in).

	Returns:
		Points per document unit, 1.0 when the unit is not recognized.
	"""
	if unit is None:
		return 1.0
	return UNIT_POINTS.get(unit.strip(), 1.0)


#============================================
def flip_y(y: float, extent: float) -> float:
	"""
	Mirror a vertical coordinate within an extent.

	Args:
		y: Coordinate measured from one edge.
		extent: Total extent of the axis.

	Returns:
		Coordinate measured from the opposite edge.
	"""
	return extent - y


#============================================
def scale_to_axis(native: tuple[float, float], axis: Axis, extent: float) -> tuple[float, float]:
	"""
	Scale a size, keeping its aspect ratio, so one axis matches an extent.

	Args:
		native: Native (width, height).
		axis: Axis that must match the extent.
		extent: Target extent.

	Returns:
		Scaled (width, height).
	"""
	width, height = native
	if axis is Axis.WIDTH:
		if width <= 0.0:
			return (0.0, 0.0)
		return (extent, height * extent / width)
	if height <= 0.0:
		return (0.0, 0.0)
	return (width * extent / height, extent)


#============================================
def fit_within(native: tuple[float, float], box_width: float, box_height: float) -> tuple[float, float]:
	"""
	Scale a size to the box height, or to the box width if that would overflow.

	Args:
		native: Native (width, height).
		box_width: Available width.
		box_height: Available height.

	Returns:
		Scaled (width, height).
	"""
	scaled = scale_to_axis(native, Axis.HEIGHT, box_height)
	if scaled[0] > box_width:
		scaled = scale_to_axis(native, Axis.WIDTH, box_width)
	return scaled
