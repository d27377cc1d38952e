"""
Readable JSON dumps of Layout, Ladder and Spread records.
"""

# Standard Library
import dataclasses
import enum
import json


#============================================
def _json_default(value):
	if isinstance(value, enum.Enum):
		return value.value
	raise TypeError(f"cannot serialize {type(value).__name__}")


#============================================
def record_to_dict(record) -> dict:
	"""
	Convert a dataclass record into nested plain data.

	Args:
		record: Layout, Ladder, Spread or any other dataclass instance.

	Returns:
		Nested dict.
	"""
	if not dataclasses.is_dataclass(record) or isinstance(record, type):
		raise TypeError(f"expected a dataclass record, got {type(record).__name__}")
	return dataclasses.asdict(record)


#============================================
def format_record(record, pretty: bool = True) -> str:
	"""
	Serialize a record to JSON text.

	Args:
		record: Dataclass record.
		pretty: Indent and sort keys when True, compact otherwise.

	Returns:
		JSON string.
	"""
	data = record_to_dict(record)
	if pretty:
		return json.dumps(data, indent=2, sort_keys=True, default=_json_default)
	return json.dumps(data, separators=(",", ":"), default=_json_default)


#============================================
def print_record(record, pretty: bool = True) -> None:
	print(format_record(record, pretty))
