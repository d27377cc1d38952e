"""
CLI entry points for SVG spread composition.
"""

# Standard Library
import argparse
import logging
import pathlib
import sys
import time

# local repo modules
import spread_layout as spl
import spread_layout.config
import spread_layout.errors
import spread_layout.render
import spread_layout.report
import spread_layout.spread


RenderConfig = spl.config.RenderConfig
SpreadLayoutError = spl.errors.SpreadLayoutError

DEFAULT_FONT_REGULAR = spl.config.DEFAULT_FONT_REGULAR
DEFAULT_TEXT_SIZE = spl.config.DEFAULT_TEXT_SIZE


#============================================
def build_config(args: argparse.Namespace) -> RenderConfig:
	"""
	Build render config from CLI args.

	Args:
		args: Parsed argparse namespace.

	Returns:
		RenderConfig.
	"""
	config = RenderConfig(
		compress_streams=args.compress,
		merge_identical_objects=args.compress,
		font_name=DEFAULT_FONT_REGULAR,
		field_border=args.field_border,
		field_font_size=DEFAULT_TEXT_SIZE,
	)
	return config


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command line arguments.

	Args:
		argv: Argument list, defaults to sys.argv.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(description="Compose an SVG layout spread into a fillable PDF page.")
	parser.add_argument("layout_path", help="Layout SVG file.")

	input_group = parser.add_argument_group("Input")
	input_group.add_argument("-s", "--spread", dest="spread_name", required=True, help="Spread name to compose.")
	input_group.add_argument(
		"-i", "--previous-image", dest="previous_image", default=None,
		help="Previous-stage raster image placed into the spread.",
	)
	input_group.add_argument(
		"-b", "--base-dir", dest="base_dir", default=None,
		help="Directory holding ladder drawings and images (default: layout directory).",
	)

	output_group = parser.add_argument_group("Output")
	output_group.add_argument("-o", "--output", dest="output_path", default=None, help="Output PDF path.")
	output_group.add_argument("-n", "--page-number", dest="page_number", type=int, default=1, help="Page number used in field names.")
	output_group.add_argument("-j", "--dump-json", dest="dump_json", action="store_true", help="Print layout and spread records as JSON.")
	output_group.add_argument("-c", "--compress", dest="compress", action="store_true", help="Compress streams and merge identical objects.")
	output_group.add_argument("-C", "--no-compress", dest="compress", action="store_false", help="Write the PDF without optimization.")
	output_group.add_argument("-f", "--field-border", dest="field_border", action="store_true", help="Draw borders around text fields.")
	output_group.add_argument("-F", "--no-field-border", dest="field_border", action="store_false", help="Leave text fields borderless.")

	behavior_group = parser.add_argument_group("Behavior")
	behavior_group.add_argument(
		"--stop-before-rendering",
		dest="stop_before_rendering",
		action="store_true",
		help="Stop after composing the spread (skip rendering).",
	)
	behavior_group.add_argument("-v", "--verbose", dest="verbose", action="store_true", help="Log debug messages.")

	parser.set_defaults(
		compress=True,
		field_border=False,
		dump_json=False,
		stop_before_rendering=False,
		verbose=False,
	)

	args = parser.parse_args(argv)
	return args


#============================================
def run_pipeline(args: argparse.Namespace) -> None:
	"""
	Run the full pipeline from layout drawing to output PDF.

	Args:
		args: Parsed argparse namespace.
	"""
	layout_path = pathlib.Path(args.layout_path)
	base_dir = layout_path.parent
	if args.base_dir is not None:
		base_dir = pathlib.Path(args.base_dir)
	output_path = args.output_path
	if output_path is None:
		output_path = f"{args.spread_name}.pdf"

	print("SVG spread pipeline")
	print(f"Layout: {layout_path}")
	print(f"Spread: {args.spread_name}")
	print(f"Base directory: {base_dir}")
	if args.previous_image:
		print(f"Previous image: {args.previous_image}")
	if args.stop_before_rendering:
		print("Stop before rendering: True")
	else:
		print(f"Output PDF: {output_path}")

	start_time = time.perf_counter()
	parse_start = time.perf_counter()
	layout, ladders = spl.render.load_spread_inputs(layout_path, args.spread_name, base_dir)
	parse_end = time.perf_counter()
	print(f"Ladders loaded: {len(ladders)}")

	previous_image_size = None
	previous_image_filename = ""
	if args.previous_image:
		previous_image_filename = str(pathlib.Path(args.previous_image).resolve())
		previous_image_size = spl.render.measure_image(pathlib.Path(previous_image_filename))
		print(f"Previous image size: {previous_image_size[0]:.2f}x{previous_image_size[1]:.2f} pt")

	compose_start = time.perf_counter()
	spread = spl.spread.compose_spread(
		layout,
		args.spread_name,
		ladders,
		previous_image_size=previous_image_size,
		previous_image_filename=previous_image_filename,
	)
	compose_end = time.perf_counter()
	print(f"Page size: {spread.dim.width:.2f}x{spread.dim.height:.2f} pt")
	print(f"Images: {len(spread.images)}")
	print(f"Text fields: {len(spread.text_fields)}")
	print(f"Text prefills: {len(spread.text_prefills)}")

	if args.dump_json:
		spl.report.print_record(layout)
		spl.report.print_record(spread)

	if args.stop_before_rendering:
		print("Stopping before rendering.")
		total_time = time.perf_counter() - start_time
		print(
			"Timing: parse={:.2f}s compose={:.2f}s total={:.2f}s".format(
				parse_end - parse_start,
				compose_end - compose_start,
				total_time,
			)
		)
		return

	config = build_config(args)
	render_start = time.perf_counter()
	result = spl.render.render_spread_pdf(
		spread,
		pathlib.Path(output_path),
		config,
		page_number=args.page_number,
		base_dir=base_dir,
	)
	render_end = time.perf_counter()

	total_time = time.perf_counter() - start_time
	print(
		"Timing: parse={:.2f}s compose={:.2f}s render={:.2f}s total={:.2f}s".format(
			parse_end - parse_start,
			compose_end - compose_start,
			render_end - render_start,
			total_time,
		)
	)
	print(f"PDF written: {result.output_path}")


#============================================
def main(argv: list[str] | None = None) -> None:
	"""
	Main entry point.
	"""
	args = parse_args(argv)
	level = logging.DEBUG if args.verbose else logging.WARNING
	logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
	try:
		run_pipeline(args)
	except SpreadLayoutError as error:
		print(f"Error: {error}", file=sys.stderr)
		sys.exit(1)
