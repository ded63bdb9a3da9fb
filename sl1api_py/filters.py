# -*- coding: utf-8 -*-
"""This module implements building of filters for the API.

The API filters an index with query parameters of the form ``filter.<field>[.<operator>]=<value>``. This module only
cares about the part after ``filter.``; a filter specification is a mapping of ``<field>[.<operator>]`` keys to string
values, the URI builder (:meth:`sl1api_py.api.API.build_uri`) adds the prefix and the encoding.

Search strings can be given with wildcards, which are translated to an operator:

- ``*foo*`` -> ``<field>.contains=foo``
- ``foo*`` -> ``<field>.begins_with=foo``
- ``*foo`` -> ``<field>.ends_with=foo``
- ``foo`` -> ``<field>=foo`` (exact match)
- ``*`` -> no filter for this field at all

A wildcard anywhere else (e.g. ``fo*o``) can't be expressed with one operator and raises a
:class:`sl1api_py.exceptions.FilterParsingError`.
"""

import collections.abc
import enum
from typing import Iterable, Mapping, Optional, Tuple

from .exceptions import FilterParsingError, ValidationError

#: The wildcard character for search strings
WILDCARD = "*"
#: Name of the ID field in filters
ID_FIELD = "_id"


class Operator(enum.Enum):
	"""Filter operators the API understands (as key suffix)."""

	EQUALS = None
	CONTAINS = "contains"
	BEGINS_WITH = "begins_with"
	ENDS_WITH = "ends_with"
	IN = "in"
	NOT = "not"
	NOT_IN = "not_in"
	MIN = "min"
	MAX = "max"
	LT = "lt"
	GT = "gt"
	ISNULL = "isnull"


#: All operator suffixes that are accepted in filter keys
OPERATOR_SUFFIXES = frozenset((item.value for item in Operator if item.value is not None))


#######################################################################################################################
# Single values and keys
#######################################################################################################################


def filter_value(value) -> str:
	"""Convert a Python value to the string the API expects as a filter value.

	Booleans are 1 or 0, sequences (except strings) are comma-joined, None is an empty string.
	"""
	if value is None:
		return ""
	if isinstance(value, bool):
		return "1" if value else "0"
	if isinstance(value, (collections.abc.Sequence, collections.abc.Set)) and not isinstance(value, (str, bytes)):
		return ",".join(filter_value(item) for item in value)
	return str(value)


def split_key(key: str) -> Tuple[str, Operator]:
	"""Split a filter key into field name and operator.

	:raises FilterParsingError: if the key is empty or the suffix is not a known operator.
	"""
	if not key or not isinstance(key, str):
		raise FilterParsingError(f"Invalid filter key {key!r}")
	field, sep, suffix = key.rpartition(".")
	if not sep:
		return key, Operator.EQUALS
	if not field or suffix not in OPERATOR_SUFFIXES:
		raise FilterParsingError(f"Unknown filter operator {suffix!r} in {key!r}")
	return field, Operator(suffix)


def join_key(field: str, operator: Operator) -> str:
	"""Join field name and operator to a filter key."""
	if operator.value is None:
		return field
	return f"{field}.{operator.value}"


def parse_wildcard(value: str) -> Tuple[Optional[Operator], str]:
	"""Translate a wildcard search string to an operator and the value without wildcards.

	Returns (None, "") for a pattern that matches everything (only wildcards).
	:raises FilterParsingError: on a wildcard not at the beginning or end of the value.
	"""
	if value.strip(WILDCARD) == "":
		return None, ""

	leading = value.startswith(WILDCARD)
	trailing = value.endswith(WILDCARD)
	stripped = value.strip(WILDCARD)
	if WILDCARD in stripped:
		raise FilterParsingError(f"Wildcards are only allowed at the beginning and end of {value!r}")

	if leading and trailing:
		return Operator.CONTAINS, stripped
	if trailing:
		return Operator.BEGINS_WITH, stripped
	if leading:
		return Operator.ENDS_WITH, stripped
	return Operator.EQUALS, stripped


#######################################################################################################################
# Whole filter specifications
#######################################################################################################################


def field_filter(field: str, value) -> dict:
	"""Build the filter specification for one field and a search value.

	Strings are wildcard-translated, sequences become an ``in`` filter, everything else an exact match.
	If the field already carries an operator suffix, the value is used as-is (no wildcard translation).
	"""
	field, operator = split_key(field)
	if operator is not Operator.EQUALS:
		return {join_key(field, operator): filter_value(value)}

	if isinstance(value, str):
		operator, value = parse_wildcard(value)
		if operator is None:
			# Matches everything
			return {}
		return {join_key(field, operator): value}
	if isinstance(value, (collections.abc.Sequence, collections.abc.Set)) and not isinstance(value, bytes):
		return {join_key(field, Operator.IN): filter_value(value)}
	return {field: filter_value(value)}


def build_filter(mapping: Optional[Mapping] = None, **fields) -> dict:
	"""Build a filter specification from a mapping and/or keyword arguments (field -> search value).

	Fields with a value of None are skipped, so optional search parameters can be passed on without checking them.
	"""
	items = dict(mapping or {})
	items.update(fields)
	ret = {}
	for field, value in items.items():
		if value is None:
			continue
		ret.update(field_filter(field, value))
	return ret


def validate_filter(spec: Optional[Mapping]) -> dict:
	"""Validate keys of an already built filter specification, return it as a dict with string values."""
	if spec is None:
		return {}
	if not isinstance(spec, collections.abc.Mapping):
		raise FilterParsingError(f"A filter has to be a mapping, not {type(spec).__name__}")
	ret = {}
	for key, value in spec.items():
		split_key(key)
		ret[key] = filter_value(value)
	return ret


def id_filter(ids: Iterable) -> dict:
	"""Filter for the given IDs (``_id.in``)."""
	ids = [filter_value(id_) for id_ in ids]
	if not ids:
		raise ValidationError("An ID filter needs at least one ID")
	return {join_key(ID_FIELD, Operator.IN): ",".join(ids)}


def order_params(order: Optional[str]) -> dict:
	"""Translate a sort key to query parameters: "field" sorts ascending, "-field" descending."""
	if not order:
		return {}
	if order.startswith("-"):
		field, direction = order[1:], "DESC"
	else:
		field, direction = order.lstrip("+"), "ASC"
	if not field:
		raise ValidationError(f"Invalid sort key {order!r}")
	return {f"order.{field}": direction}
