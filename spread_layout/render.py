"""
Render a composed Spread into a fillable single-page PDF.
"""

# Standard Library
import io
import logging
import pathlib

# PIP3 modules
import PIL.Image
import pypdf
import reportlab.lib.utils
import reportlab.pdfbase.pdfmetrics
import reportlab.pdfgen.canvas

# local repo modules
import spread_layout as spl
import spread_layout.config
import spread_layout.ladder
import spread_layout.layout
import spread_layout.spread


RenderConfig = spl.config.RenderConfig
RenderResult = spl.config.RenderResult
Spread = spl.spread.Spread
ImageInsert = spl.spread.ImageInsert
TextField = spl.ladder.TextField
TextPrefill = spl.ladder.TextPrefill
Layout = spl.layout.Layout
Ladder = spl.ladder.Ladder

DEFAULT_IMAGE_DPI = spl.config.DEFAULT_IMAGE_DPI
FIELD_NAME_TEMPLATE = spl.config.FIELD_NAME_TEMPLATE
LADDER_PREFIX = spl.config.LADDER_PREFIX
LADDER_SOURCE_SUFFIX = spl.config.LADDER_SOURCE_SUFFIX
MULTILINE_MARKER = spl.config.MULTILINE_MARKER

logger = logging.getLogger(__name__)


#============================================
def measure_image(path: pathlib.Path) -> tuple[float, float]:
	"""
	Measure a raster image in points.

	Args:
		path: Image file path.

	Returns:
		Tuple of (width, height) in points.
	"""
	with PIL.Image.open(path) as image:
		pixel_width, pixel_height = image.size
		dpi = image.info.get("dpi", (DEFAULT_IMAGE_DPI, DEFAULT_IMAGE_DPI))
	dpi_x = float(dpi[0]) if dpi[0] else DEFAULT_IMAGE_DPI
	dpi_y = float(dpi[1]) if dpi[1] else DEFAULT_IMAGE_DPI
	width = spl.config.inches_to_points(pixel_width / dpi_x)
	height = spl.config.inches_to_points(pixel_height / dpi_y)
	return (width, height)


#============================================
def load_spread_inputs(
	layout_path: pathlib.Path,
	spread_name: str,
	base_dir: pathlib.Path | None = None,
) -> tuple[Layout, dict[str, Ladder]]:
	"""
	Read a layout drawing and every ladder drawing its spread needs.

	Args:
		layout_path: Layout SVG path.
		spread_name: Spread to compose.
		base_dir: Directory holding the ladder drawings, defaults to the
			layout's directory.

	Returns:
		Tuple of (layout, ladders keyed by anchor name).
	"""
	layout_path = pathlib.Path(layout_path)
	if base_dir is None:
		base_dir = layout_path.parent
	layout = spl.layout.build_layout(layout_path.read_bytes())
	ladders: dict[str, Ladder] = {}
	for key in sorted(layout.filenames):
		if not key.startswith(LADDER_PREFIX) or spread_name not in key:
			continue
		ladder_path = pathlib.Path(base_dir) / (layout.filenames[key] + LADDER_SOURCE_SUFFIX)
		logger.debug("reading ladder %r from %s", key, ladder_path)
		ladders[key] = spl.ladder.build_ladder(ladder_path.read_bytes())
	return (layout, ladders)


#============================================
def draw_image_insert(
	pdf: reportlab.pdfgen.canvas.Canvas,
	insert: ImageInsert,
	base_dir: pathlib.Path,
) -> None:
	"""
	Draw one image insert with its lower-left corner at the insert corner.

	Args:
		pdf: ReportLab canvas.
		insert: Image insert.
		base_dir: Directory the insert filename is relative to.
	"""
	path = pathlib.Path(base_dir) / insert.filename
	with PIL.Image.open(path) as image:
		image.load()
		image_reader = reportlab.lib.utils.ImageReader(image.copy())
	pdf.drawImage(
		image_reader,
		insert.corner.x,
		insert.corner.y,
		width=insert.size.width,
		height=insert.size.height,
		mask=None,
		preserveAspectRatio=False,
		anchor="sw",
	)


#============================================
def paragraph_lines(text: str, font_name: str, font_size: float, wrap_width: float | None) -> list[str]:
	"""
	Split paragraph text into drawable lines.

	Args:
		text: Paragraph text.
		font_name: Font used to measure words.
		font_size: Font size.
		wrap_width: Wrap width in points, or None to keep explicit lines only.

	Returns:
		List of lines.
	"""
	if wrap_width is None or wrap_width <= 0.0:
		return text.splitlines()
	lines: list[str] = []
	for source_line in text.splitlines():
		if not source_line.strip():
			lines.append("")
			continue
		lines.extend(reportlab.lib.utils.simpleSplit(source_line, font_name, font_size, wrap_width))
	return lines


#============================================
def draw_prefill(
	pdf: reportlab.pdfgen.canvas.Canvas,
	prefill: TextPrefill,
	text: str,
) -> int:
	"""
	Draw a prefill paragraph inside its box.

	Lines hang from the top of the box. Angles rotate the paragraph about
	its top-left corner.

	Args:
		pdf: ReportLab canvas.
		prefill: Prefill with its paragraph style.
		text: Text to draw, which may differ from the paragraph text.

	Returns:
		Number of lines drawn.
	"""
	paragraph = prefill.paragraph
	rect = prefill.rect
	margins = paragraph.margins
	if paragraph.absolute_positioning:
		margins = spl.ladder.Margins()
	available = rect.size.width - margins.left - margins.right

	wrap_width = None
	if paragraph.wrap:
		wrap_width = paragraph.wrap_width if paragraph.wrap_width > 0.0 else available
	lines = paragraph_lines(text, paragraph.font, paragraph.size, wrap_width)
	if not lines:
		return 0
	line_box = available
	if wrap_width is not None:
		line_box = wrap_width

	pdf.saveState()
	pdf.setFont(paragraph.font, paragraph.size)
	pdf.setFillColorRGB(paragraph.color[0], paragraph.color[1], paragraph.color[2])
	pdf.translate(rect.corner.x + margins.left, rect.corner.y + rect.size.height - margins.top)
	if paragraph.angle:
		pdf.rotate(paragraph.angle)

	for index, line in enumerate(lines):
		baseline = -paragraph.size - index * paragraph.line_height
		line_width = reportlab.pdfbase.pdfmetrics.stringWidth(line, paragraph.font, paragraph.size)
		if paragraph.alignment == "center":
			pdf.drawString((line_box - line_width) / 2.0, baseline, line)
		elif paragraph.alignment == "right":
			pdf.drawString(line_box - line_width, baseline, line)
		elif paragraph.alignment == "justify" and index < len(lines) - 1 and line.count(" ") > 0:
			text_object = pdf.beginText(0.0, baseline)
			text_object.setWordSpace((line_box - line_width) / line.count(" "))
			text_object.textLine(line)
			pdf.drawText(text_object)
		else:
			pdf.drawString(0.0, baseline, line)
	pdf.restoreState()
	return len(lines)


#============================================
def add_text_field(
	pdf: reportlab.pdfgen.canvas.Canvas,
	field: TextField,
	page_number: int,
	config: RenderConfig,
) -> str:
	"""
	Add an AcroForm text field over the field's box.

	Args:
		pdf: ReportLab canvas.
		field: Text field.
		page_number: Page number used in the field name.
		config: Render configuration.

	Returns:
		Field name.
	"""
	name = FIELD_NAME_TEMPLATE.format(page=page_number, field=field.id)
	field_flags = ""
	if field.multiline:
		field_flags = MULTILINE_MARKER
	border_width = 1 if config.field_border else 0
	pdf.acroForm.textfield(
		name=name,
		tooltip=field.id,
		value=field.prefill_literal,
		x=field.rect.corner.x,
		y=field.rect.corner.y,
		width=field.rect.size.width,
		height=field.rect.size.height,
		fontName=config.font_name,
		fontSize=config.field_font_size,
		borderWidth=border_width,
		fieldFlags=field_flags,
		forceBorder=config.field_border,
	)
	return name


#============================================
def optimize_pdf(data: bytes, output_path: pathlib.Path, config: RenderConfig) -> None:
	"""
	Rewrite a PDF through pypdf with compressed streams.

	Args:
		data: PDF bytes from the canvas.
		output_path: Output PDF path.
		config: Render configuration.
	"""
	writer = pypdf.PdfWriter(clone_from=io.BytesIO(data))
	if config.compress_streams:
		for page in writer.pages:
			page.compress_content_streams()
	if config.merge_identical_objects:
		writer.compress_identical_objects(remove_identicals=True, remove_orphans=True)
	with pathlib.Path(output_path).open("wb") as handle:
		writer.write(handle)


#============================================
def render_spread_pdf(
	spread: Spread,
	output_path: pathlib.Path,
	config: RenderConfig,
	page_number: int = 1,
	prefills: dict[int, dict[str, str]] | None = None,
	base_dir: pathlib.Path | None = None,
) -> RenderResult:
	"""
	Render one spread as a single page PDF with fillable text fields.

	Draw order is the previous-stage image, then the other images, then
	the prefill paragraphs. Text fields sit on top as form widgets.

	Args:
		spread: Composed spread.
		output_path: Output PDF path.
		config: Render configuration.
		page_number: Page number used in field names and prefill lookups.
		prefills: Prefill text overrides keyed by page number then prefill id.
		base_dir: Directory image filenames are relative to.

	Returns:
		RenderResult.
	"""
	if prefills is None:
		prefills = {}
	if base_dir is None:
		base_dir = pathlib.Path(".")
	page_prefills = prefills.get(page_number, {})

	buffer = io.BytesIO()
	pdf = reportlab.pdfgen.canvas.Canvas(buffer, pagesize=(spread.dim.width, spread.dim.height))

	image_count = 0
	if spread.previous_image is not None:
		draw_image_insert(pdf, spread.previous_image, base_dir)
		image_count += 1
	for insert in spread.images:
		draw_image_insert(pdf, insert, base_dir)
		image_count += 1

	for prefill in spread.text_prefills:
		text = page_prefills.get(prefill.id, prefill.paragraph.text)
		draw_prefill(pdf, prefill, text)

	for field in spread.text_fields:
		name = add_text_field(pdf, field, page_number, config)
		logger.debug("text field %s", name)

	pdf.showPage()
	pdf.save()
	optimize_pdf(buffer.getvalue(), output_path, config)

	return RenderResult(
		output_path=str(output_path),
		page_width=spread.dim.width,
		page_height=spread.dim.height,
		images=image_count,
		text_fields=len(spread.text_fields),
		text_prefills=len(spread.text_prefills),
	)
