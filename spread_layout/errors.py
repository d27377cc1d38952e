"""
Exception types for layout parsing and spread composition.
"""


class SpreadLayoutError(Exception):
	"""
	Base class for every error raised by this package.
	"""


class DocumentParseError(SpreadLayoutError, ValueError):
	"""
	The source document is not a usable drawing document.
	"""


class GeometryParseError(DocumentParseError):
	"""
	A point or box carries a numeral that does not parse.
	"""


class UnitError(DocumentParseError):
	"""
	A unit-suffixed value has an unknown unit or a bad numeral.
	"""


class PrefillDecodeError(DocumentParseError):
	"""
	A prefill box description is not a valid paragraph descriptor.
	"""


class SpreadCompositionError(SpreadLayoutError):
	"""
	A spread cannot be composed from the layout it was given.
	"""


class NoPageSizeError(SpreadCompositionError):
	pass


class MissingImageSizeError(SpreadCompositionError):
	pass


class AxisMismatchError(SpreadCompositionError):
	pass


class MissingLadderError(SpreadCompositionError):
	pass


class MissingPreviousImageError(SpreadCompositionError):
	pass
