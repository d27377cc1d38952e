import logging

import pytest

import spread_layout.errors
import spread_layout.geometry
import spread_layout.ladder
import spread_layout.layout
import spread_layout.spread

import svg_builder

Axis = spread_layout.geometry.Axis
Dim = spread_layout.geometry.Dim
Point = spread_layout.geometry.Point
Rect = spread_layout.geometry.Rect
ImageInsert = spread_layout.spread.ImageInsert


#============================================
def make_layout(**overrides) -> spread_layout.layout.Layout:
	"""
	Build a Layout record with empty maps unless overridden.
	"""
	values = {
		"id": "layout",
		"dim": Dim(200.0, 300.0),
		"reference_anchor": Point(0.0, 0.0),
		"anchors": {},
		"page_sizes_static": {},
		"page_sizes_dynamic": {},
		"image_sizes_static": {},
		"image_sizes_dynamic": {},
		"filenames": {},
	}
	values.update(overrides)
	return spread_layout.layout.Layout(**values)


#============================================
def make_ladder() -> spread_layout.ladder.Ladder:
	field = spread_layout.ladder.TextField(
		id="name",
		rect=Rect(Point(10.0, 70.0), Dim(50.0, 10.0)),
		tab_sequence=1,
	)
	prefill = spread_layout.ladder.TextPrefill(
		id="heading",
		rect=Rect(Point(5.0, 80.0), Dim(90.0, 15.0)),
	)
	return spread_layout.ladder.Ladder(
		id="flow-check",
		dim=Dim(100.0, 100.0),
		reference_anchor=Point(0.0, 100.0),
		text_fields=[field],
		text_prefills=[prefill],
	)


#============================================
def test_static_page_composes_verbatim() -> None:
	layout = make_layout(page_sizes_static={"mark": Dim(100.0, 200.0)})
	spread = spread_layout.spread.compose_spread(layout, "mark", {})
	assert spread.dim == Dim(100.0, 200.0)
	assert spread.extra_along_dynamic_axis == 0.0
	assert spread.dynamic_axis is None
	assert spread.images == []
	assert spread.previous_image is None


#============================================
def test_dynamic_page_with_static_image_resolves_now() -> None:
	"""
	Reduced-information branch: the image entry fixes the dynamic axis.
	"""
	layout = make_layout(
		page_sizes_dynamic={"check": Dim(0.0, 50.0, width_is_dynamic=True)},
		image_sizes_static={"check": Dim(20.0, 50.0)},
	)
	spread = spread_layout.spread.compose_spread(layout, "check", {})
	assert spread.dim == Dim(20.0, 50.0)
	assert spread.dim.is_dynamic is False
	assert spread.extra_along_dynamic_axis == 20.0
	assert spread.dynamic_axis is Axis.WIDTH


#============================================
def test_dynamic_axes_must_agree() -> None:
	layout = make_layout(
		page_sizes_dynamic={"check": Dim(0.0, 50.0, width_is_dynamic=True)},
		image_sizes_dynamic={"check": Dim(20.0, 0.0, height_is_dynamic=True)},
	)
	with pytest.raises(spread_layout.errors.AxisMismatchError):
		spread_layout.spread.compose_spread(layout, "check", {}, previous_image_size=(10.0, 10.0))


#============================================
def test_static_page_with_dynamic_image_is_rejected() -> None:
	layout = make_layout(
		page_sizes_static={"check": Dim(100.0, 50.0)},
		image_sizes_dynamic={"check": Dim(0.0, 50.0, width_is_dynamic=True)},
	)
	with pytest.raises(spread_layout.errors.AxisMismatchError):
		spread_layout.spread.compose_spread(layout, "check", {})


#============================================
def test_page_declaring_both_axes_dynamic_is_rejected() -> None:
	layout = make_layout(
		page_sizes_dynamic={"check": Dim(0.0, 0.0, width_is_dynamic=True, height_is_dynamic=True)},
	)
	with pytest.raises(spread_layout.errors.AxisMismatchError):
		spread_layout.spread.compose_spread(layout, "check", {}, previous_image_size=(1.0, 1.0))


#============================================
def test_dynamic_page_and_image_defer_to_measured_image() -> None:
	"""
	Both dynamic on width: the measured image fixes the width plus delta.
	"""
	layout = make_layout(
		anchors={"img-previous-check": Point(3.0, 4.0)},
		page_sizes_dynamic={"check": Dim(10.0, 50.0, width_is_dynamic=True)},
		image_sizes_dynamic={"previous-check": Dim(0.0, 40.0, width_is_dynamic=True)},
	)
	spread = spread_layout.spread.compose_spread(
		layout,
		"check",
		{},
		previous_image_size=(200.0, 100.0),
		previous_image_filename="scan.png",
	)
	# image scaled to the 40pt image height: 80x40
	assert spread.dim == Dim(90.0, 50.0)
	assert spread.extra_along_dynamic_axis == 80.0
	assert spread.previous_image == ImageInsert("scan.png", Point(3.0, 4.0), Dim(80.0, 40.0))


#============================================
def test_dynamic_page_without_image_entry_fits_page_height() -> None:
	layout = make_layout(
		origin=Point(1.0, 2.0),
		page_sizes_dynamic={"check": Dim(10.0, 50.0, width_is_dynamic=True)},
	)
	spread = spread_layout.spread.compose_spread(layout, "check", {}, previous_image_size=(100.0, 100.0))
	assert spread.dim == Dim(60.0, 50.0)
	assert spread.extra_along_dynamic_axis == 50.0
	assert spread.previous_image.corner == Point(1.0, 2.0)
	assert spread.previous_image.size == Dim(50.0, 50.0)


#============================================
def test_dynamic_height_page() -> None:
	layout = make_layout(page_sizes_dynamic={"check": Dim(100.0, 0.0, height_is_dynamic=True)})
	spread = spread_layout.spread.compose_spread(layout, "check", {}, previous_image_size=(50.0, 25.0))
	assert spread.dim == Dim(100.0, 50.0)
	assert spread.dynamic_axis is Axis.HEIGHT
	assert spread.extra_along_dynamic_axis == 50.0


#============================================
def test_deferred_axis_needs_a_measured_image() -> None:
	layout = make_layout(page_sizes_dynamic={"check": Dim(10.0, 50.0, width_is_dynamic=True)})
	with pytest.raises(spread_layout.errors.MissingPreviousImageError):
		spread_layout.spread.compose_spread(layout, "check", {})


#============================================
def test_static_page_fits_previous_image_inside_page() -> None:
	layout = make_layout(page_sizes_static={"mark": Dim(100.0, 200.0)})
	spread = spread_layout.spread.compose_spread(layout, "mark", {}, previous_image_size=(50.0, 50.0))
	assert spread.dim == Dim(100.0, 200.0)
	assert spread.previous_image.size == Dim(100.0, 100.0)


#============================================
def test_no_page_size_raises() -> None:
	layout = make_layout(page_sizes_static={"mark": Dim(100.0, 200.0)})
	with pytest.raises(spread_layout.errors.NoPageSizeError):
		spread_layout.spread.compose_spread(layout, "check", {})


#============================================
def test_decorative_image_without_size_raises() -> None:
	layout = make_layout(
		anchors={"img-logo-mark": Point(5.0, 5.0)},
		page_sizes_static={"mark": Dim(100.0, 200.0)},
		filenames={"img-logo-mark": "logo"},
	)
	with pytest.raises(spread_layout.errors.MissingImageSizeError):
		spread_layout.spread.compose_spread(layout, "mark", {})


#============================================
def test_decorative_images_use_sizes_and_overrides() -> None:
	layout = make_layout(
		anchors={"img-b-mark": Point(5.0, 6.0), "img-a-mark": Point(1.0, 2.0)},
		page_sizes_static={"mark": Dim(100.0, 200.0)},
		image_sizes_static={"img-b-mark": Dim(10.0, 20.0), "img-a-mark": Dim(30.0, 40.0)},
		filenames={"img-b-mark": "banner", "img-a-mark": "logo"},
	)
	spread = spread_layout.spread.compose_spread(
		layout,
		"mark",
		{},
		image_overrides={"img-b-mark": "banner-blue"},
	)
	assert spread.images == [
		ImageInsert("logo.jpg", Point(1.0, 2.0), Dim(30.0, 40.0)),
		ImageInsert("banner-blue.jpg", Point(5.0, 6.0), Dim(10.0, 20.0)),
	]


#============================================
def test_ladder_is_placed_at_its_anchor() -> None:
	layout = make_layout(
		anchors={"svg-mark-flow": Point(5.0, 6.0)},
		page_sizes_static={"mark": Dim(100.0, 200.0)},
		filenames={"svg-mark-flow": "flow-mark"},
	)
	spread = spread_layout.spread.compose_spread(layout, "mark", {"svg-mark-flow": make_ladder()})
	assert spread.images == [ImageInsert("flow-mark.png", Point(5.0, 6.0), Dim(100.0, 100.0))]
	assert spread.text_fields[0].rect == Rect(Point(15.0, 76.0), Dim(50.0, 10.0))
	assert spread.text_fields[0].tab_sequence == 1
	assert spread.text_prefills[0].rect.corner == Point(10.0, 86.0)


#============================================
def test_ladder_without_anchor_uses_layout_origin() -> None:
	"""
	Anchorless content lands on the lower-left page corner, not the reference.
	"""
	layout = make_layout(
		reference_anchor=Point(0.0, 300.0),
		origin=Point(2.0, 3.0),
		page_sizes_static={"mark": Dim(100.0, 200.0)},
		filenames={"svg-mark-flow": "flow-mark"},
	)
	spread = spread_layout.spread.compose_spread(layout, "mark", {"svg-mark-flow": make_ladder()})
	assert spread.images[0].corner == Point(2.0, 3.0)
	assert spread.text_fields[0].rect.corner == Point(12.0, 73.0)


#============================================
def test_missing_ladder_raises() -> None:
	layout = make_layout(
		page_sizes_static={"mark": Dim(100.0, 200.0)},
		filenames={"svg-mark-flow": "flow-mark"},
	)
	with pytest.raises(spread_layout.errors.MissingLadderError):
		spread_layout.spread.compose_spread(layout, "mark", {})


#============================================
def test_extra_width_shifts_content_but_not_previous_image() -> None:
	layout = make_layout(
		anchors={"svg-check-flow": Point(0.0, 0.0), "img-previous-check": Point(0.0, 0.0)},
		page_sizes_dynamic={"check": Dim(100.0, 100.0, width_is_dynamic=True)},
		filenames={"svg-check-flow": "flow-check"},
	)
	spread = spread_layout.spread.compose_spread(
		layout,
		"check",
		{"svg-check-flow": make_ladder()},
		previous_image_size=(60.0, 100.0),
	)
	assert spread.dim == Dim(160.0, 100.0)
	assert spread.extra_along_dynamic_axis == 60.0
	assert spread.previous_image.corner == Point(0.0, 0.0)
	assert spread.images[0].corner == Point(60.0, 0.0)
	assert spread.text_fields[0].rect.corner == Point(70.0, 70.0)
	assert spread.text_prefills[0].rect.corner == Point(65.0, 80.0)


#============================================
def test_other_spreads_are_not_composed_in() -> None:
	layout = make_layout(
		anchors={"img-logo-other": Point(1.0, 1.0)},
		page_sizes_static={"mark": Dim(100.0, 200.0), "other": Dim(1.0, 1.0)},
		filenames={"img-logo-other": "logo", "svg-other-flow": "flow-other"},
	)
	spread = spread_layout.spread.compose_spread(layout, "mark", {})
	assert spread.images == []
	assert spread.text_fields == []


#============================================
def test_ambiguous_page_key_picks_first_sorted(caplog) -> None:
	layout = make_layout(page_sizes_static={"mark-b": Dim(2.0, 2.0), "mark-a": Dim(1.0, 1.0)})
	with caplog.at_level(logging.WARNING, logger="spread_layout.spread"):
		spread = spread_layout.spread.compose_spread(layout, "mark", {})
	assert spread.dim == Dim(1.0, 1.0)
	assert "matches several entries" in caplog.text


#============================================
def test_exact_page_key_wins() -> None:
	layout = make_layout(page_sizes_static={"mark-b": Dim(2.0, 2.0), "mark": Dim(3.0, 3.0)})
	spread = spread_layout.spread.compose_spread(layout, "mark", {})
	assert spread.dim == Dim(3.0, 3.0)


#============================================
def test_exact_static_page_key_beats_dynamic_partial_match() -> None:
	layout = make_layout(
		page_sizes_static={"mark": Dim(100.0, 200.0)},
		page_sizes_dynamic={"mark-wide": Dim(0.0, 50.0, width_is_dynamic=True)},
	)
	spread = spread_layout.spread.compose_spread(layout, "mark", {})
	assert spread.dim == Dim(100.0, 200.0)
	assert spread.dynamic_axis is None
	assert spread.extra_along_dynamic_axis == 0.0


#============================================
def test_exact_static_image_key_beats_dynamic_partial_match() -> None:
	"""
	previous-<spread> in the static map wins over a dynamic partial match.
	"""
	layout = make_layout(
		page_sizes_dynamic={"check": Dim(10.0, 50.0, width_is_dynamic=True)},
		image_sizes_static={"previous-check": Dim(20.0, 50.0)},
		image_sizes_dynamic={"check-other": Dim(0.0, 40.0, width_is_dynamic=True)},
	)
	assert spread_layout.spread.find_previous_image_size(layout, "check") == Dim(20.0, 50.0)
	spread = spread_layout.spread.compose_spread(layout, "check", {})
	assert spread.dim == Dim(30.0, 50.0)
	assert spread.extra_along_dynamic_axis == 20.0


#============================================
def test_deferred_previous_image_never_overflows_page_height() -> None:
	"""
	A taller image box is capped by the page's fixed axis.
	"""
	layout = make_layout(
		page_sizes_dynamic={"check": Dim(10.0, 50.0, width_is_dynamic=True)},
		image_sizes_dynamic={"previous-check": Dim(0.0, 400.0, width_is_dynamic=True)},
	)
	spread = spread_layout.spread.compose_spread(layout, "check", {}, previous_image_size=(100.0, 100.0))
	assert spread.dim == Dim(60.0, 50.0)
	assert spread.extra_along_dynamic_axis == 50.0
	assert spread.previous_image.size == Dim(50.0, 50.0)
	assert spread.previous_image.size.height <= spread.dim.height


#============================================
def test_resolve_page_dim_quadrants() -> None:
	resolve = spread_layout.spread.resolve_page_dim
	static = resolve(Dim(10.0, 20.0), Dim(5.0, 5.0))
	assert static.dim == Dim(10.0, 20.0)
	assert static.deferred is False
	deferred = resolve(Dim(10.0, 20.0, height_is_dynamic=True), Dim(5.0, 0.0, height_is_dynamic=True))
	assert deferred.deferred is True
	assert deferred.delta == 20.0
	assert deferred.dynamic_axis is Axis.HEIGHT
	immediate = resolve(Dim(10.0, 20.0, height_is_dynamic=True), Dim(5.0, 7.0))
	assert immediate.dim == Dim(10.0, 27.0)
	assert immediate.extra == 7.0


#============================================
def test_anchorless_previous_image_lands_on_the_page() -> None:
	"""
	Without an img-previous anchor the image sits at the lower-left page corner.
	"""
	svg_bytes = svg_builder.svg_document(
		svg_builder.layer("anchors", svg_builder.circle(0, 0, title="ref-anchor")),
		svg_builder.layer("pages", svg_builder.rect(0, 0, 200, 300, title="page-mark")),
	)
	layout = spread_layout.layout.build_layout(svg_bytes)
	assert layout.reference_anchor == Point(0.0, 300.0)
	spread = spread_layout.spread.compose_spread(layout, "mark", {}, previous_image_size=(50.0, 50.0))
	corner = spread.previous_image.corner
	size = spread.previous_image.size
	assert corner == Point(0.0, 0.0)
	assert 0.0 <= corner.y and corner.y + size.height <= spread.dim.height
	assert 0.0 <= corner.x and corner.x + size.width <= spread.dim.width
