"""
SVG drawing document parsing helpers.
"""

# Standard Library
import dataclasses
import enum
import xml.etree.ElementTree as StdElementTree

# PIP3 modules
import defusedxml
import defusedxml.ElementTree as ElementTree

# local repo modules
import spread_layout as spl
import spread_layout.config
import spread_layout.errors
import spread_layout.geometry


Axis = spl.geometry.Axis
DocumentParseError = spl.errors.DocumentParseError
GeometryParseError = spl.errors.GeometryParseError
parse_translate_offset = spl.geometry.parse_translate_offset
parse_unit_value = spl.geometry.parse_unit_value

POINT_TAGS = ("path", "circle", "ellipse")
BOX_TAGS = ("rect",)


class LayerRole(enum.Enum):
	ANCHORS = "anchors"
	PAGES = "pages"
	IMAGES = "images"
	TEXTFIELDS = "textfields"
	PREFILLS = "prefills"


@dataclasses.dataclass(frozen=True)
class NameClass:
	name: str
	is_dynamic: bool
	axis: Axis | None


@dataclasses.dataclass
class SourcePoint:
	x: float
	y: float
	title: str | None
	description: str | None


@dataclasses.dataclass
class SourceBox:
	x: float
	y: float
	width: float
	height: float
	title: str | None
	description: str | None
	element_id: str


# ordered most specific first; the first matching prefix wins
NAME_PREFIXES = {
	LayerRole.PAGES: (
		(spl.config.PAGE_DYNAMIC_WIDTH_PREFIX, True, Axis.WIDTH),
		(spl.config.PAGE_DYNAMIC_HEIGHT_PREFIX, True, Axis.HEIGHT),
		(spl.config.PAGE_DYNAMIC_PREFIX, True, Axis.WIDTH),
		(spl.config.PAGE_STATIC_PREFIX, False, None),
		(spl.config.PAGE_PREFIX, False, None),
	),
	LayerRole.IMAGES: (
		(spl.config.IMAGE_DYNAMIC_WIDTH_PREFIX, True, Axis.WIDTH),
		(spl.config.IMAGE_DYNAMIC_HEIGHT_PREFIX, True, Axis.HEIGHT),
		(spl.config.IMAGE_DYNAMIC_PREFIX, True, Axis.WIDTH),
		(spl.config.IMAGE_STATIC_PREFIX, False, None),
		(spl.config.IMAGE_PREFIX, False, None),
	),
}


#============================================
def local_name(tag: str) -> str:
	"""
	Strip the namespace from an XML tag or attribute name.

	Args:
		tag: Name like "{http://www.w3.org/2000/svg}rect".

	Returns:
		Local name like "rect".
	"""
	if tag.startswith("{") and "}" in tag:
		return tag.split("}", 1)[1]
	return tag


#============================================
def get_attribute(element: StdElementTree.Element, name: str) -> str | None:
	"""
	Look up an attribute by local name, ignoring its namespace.

	Args:
		element: XML element.
		name: Local attribute name like "label".

	Returns:
		Attribute value or None.
	"""
	if name in element.attrib:
		return element.attrib[name]
	for key, value in element.attrib.items():
		if local_name(key) == name:
			return value
	return None


#============================================
def find_first_child(
	element: StdElementTree.Element,
	suffix: str,
) -> StdElementTree.Element | None:
	"""
	Find the first child element that ends with the given suffix.

	Args:
		element: XML element to search.
		suffix: Tag suffix to match.

	Returns:
		Matching child element or None.
	"""
	for child in list(element):
		if isinstance(child.tag, str) and child.tag.endswith(suffix):
			return child
	return None


#============================================
def child_text(element: StdElementTree.Element, suffix: str) -> str | None:
	"""
	Return the stripped text of a child such as <title> or <desc>.

	Args:
		element: XML element.
		suffix: Child tag suffix.

	Returns:
		Child text, or None when the child is missing or empty.
	"""
	child = find_first_child(element, suffix)
	if child is None or child.text is None:
		return None
	text = child.text.strip()
	if not text:
		return None
	return text


#============================================
def parse_svg(svg_bytes: bytes) -> StdElementTree.Element:
	"""
	Parse SVG bytes into an element tree.

	Args:
		svg_bytes: Raw document bytes.

	Returns:
		Root element.
	"""
	try:
		root = ElementTree.fromstring(svg_bytes)
	except StdElementTree.ParseError as error:
		raise DocumentParseError(f"malformed SVG document: {error}") from error
	except defusedxml.DefusedXmlException as error:
		raise DocumentParseError(f"forbidden SVG construct: {error}") from error
	if local_name(root.tag) != "svg":
		raise DocumentParseError(f"root element is <{local_name(root.tag)}>, expected <svg>")
	return root


#============================================
def parse_number(value: str | None, what: str) -> float:
	"""
	Parse a plain numeral from a geometry attribute.

	Args:
		value: Attribute value.
		what: Description used in the error message.

	Returns:
		Parsed float.
	"""
	if value is None:
		raise GeometryParseError(f"{what} is missing")
	try:
		return float(value)
	except ValueError as error:
		raise GeometryParseError(f"{what} {value!r} is not a number") from error


#============================================
def document_title(root: StdElementTree.Element) -> str:
	"""
	Read the dc:title from the RDF metadata block.

	Args:
		root: SVG root element.

	Returns:
		Title, or an empty string.
	"""
	title = root.find("./{*}metadata/{*}RDF/{*}Work/{*}title")
	if title is None or title.text is None:
		return ""
	return title.text.strip()


#============================================
def document_unit(root: StdElementTree.Element) -> str | None:
	"""
	Read the declared document units from the named view.

	Args:
		root: SVG root element.

	Returns:
		Unit string like "mm", or None.
	"""
	named_view = find_first_child(root, "namedview")
	if named_view is None:
		return None
	unit = get_attribute(named_view, "document-units")
	if unit is None:
		return None
	return unit.strip()


#============================================
def document_size(root: StdElementTree.Element) -> tuple[float, float]:
	"""
	Read the document width and height in points.

	Args:
		root: SVG root element.

	Returns:
		Tuple of (width, height).
	"""
	width = get_attribute(root, "width")
	height = get_attribute(root, "height")
	if width is None or height is None:
		raise DocumentParseError("document has no width/height")
	return (parse_unit_value(width), parse_unit_value(height))


#============================================
def iter_layers(root: StdElementTree.Element, role: LayerRole) -> list[StdElementTree.Element]:
	"""
	Find the top-level groups whose label matches a layer role.

	Args:
		root: SVG root element.
		role: Layer role to match.

	Returns:
		Matching group elements in document order.
	"""
	layers = []
	for child in list(root):
		if not isinstance(child.tag, str) or local_name(child.tag) != "g":
			continue
		if get_attribute(child, "label") == role.value:
			layers.append(child)
	return layers


#============================================
def read_layer_points(root: StdElementTree.Element, role: LayerRole) -> list[SourcePoint]:
	"""
	Read every marked point in the layers with the given role.

	Positions include the element and layer translate offsets.

	Args:
		root: SVG root element.
		role: Layer role.

	Returns:
		List of SourcePoint entries in document order.
	"""
	points: list[SourcePoint] = []
	for layer in iter_layers(root, role):
		layer_dx, layer_dy = parse_translate_offset(get_attribute(layer, "transform"))
		for element in list(layer):
			if not isinstance(element.tag, str) or local_name(element.tag) not in POINT_TAGS:
				continue
			tag = local_name(element.tag)
			if tag == "path":
				# Inkscape stores circles as arcs with sodipodi centres
				if get_attribute(element, "cx") is None:
					continue
			x = parse_number(get_attribute(element, "cx"), f"{tag} cx")
			y = parse_number(get_attribute(element, "cy"), f"{tag} cy")
			dx, dy = parse_translate_offset(get_attribute(element, "transform"))
			points.append(
				SourcePoint(
					x=x + dx + layer_dx,
					y=y + dy + layer_dy,
					title=child_text(element, "title"),
					description=child_text(element, "desc"),
				)
			)
	return points


#============================================
def read_layer_boxes(root: StdElementTree.Element, role: LayerRole) -> list[SourceBox]:
	"""
	Read every box in the layers with the given role.

	Args:
		root: SVG root element.
		role: Layer role.

	Returns:
		List of SourceBox entries in document order.
	"""
	boxes: list[SourceBox] = []
	for layer in iter_layers(root, role):
		layer_dx, layer_dy = parse_translate_offset(get_attribute(layer, "transform"))
		for element in list(layer):
			if not isinstance(element.tag, str) or local_name(element.tag) not in BOX_TAGS:
				continue
			width = parse_number(get_attribute(element, "width"), "rect width")
			height = parse_number(get_attribute(element, "height"), "rect height")
			x = parse_number(get_attribute(element, "x") or "0", "rect x")
			y = parse_number(get_attribute(element, "y") or "0", "rect y")
			dx, dy = parse_translate_offset(get_attribute(element, "transform"))
			boxes.append(
				SourceBox(
					x=x + dx + layer_dx,
					y=y + dy + layer_dy,
					width=width,
					height=height,
					title=child_text(element, "title"),
					description=child_text(element, "desc"),
					element_id=get_attribute(element, "id") or "",
				)
			)
	return boxes


#============================================
def classify_name(role: LayerRole, label: str) -> NameClass:
	"""
	Split a page or image box label into its key and dynamic axis.

	Args:
		role: LayerRole.PAGES or LayerRole.IMAGES.
		label: Box title like "page-dynamic-check".

	Returns:
		NameClass with the stripped key.
	"""
	if role not in NAME_PREFIXES:
		raise ValueError(f"no naming convention for layer role {role.value}")
	for prefix, is_dynamic, axis in NAME_PREFIXES[role]:
		if label.startswith(prefix):
			return NameClass(label[len(prefix):], is_dynamic, axis)
	# unadorned names are static
	return NameClass(label, False, None)
