# -*- coding: utf-8 -*-
"""This module contains exceptions (and the one warning) of this package."""


class SL1ApiError(Exception):
	"""Base class for all API-related errors in this package."""

	def __init__(self, message="", status_code=None, response=None, url=None):
		super().__init__(message)
		#: HTTP status code of the response that caused this error (if there was one)
		self.status_code = status_code
		#: The response that caused this error, or None
		self.response = response
		#: Requested URL, or None
		self.url = url


class AuthenticationError(SL1ApiError):
	"""Raised on 401 and 403 responses (bad or missing credentials)."""


class NotFoundError(SL1ApiError):
	"""Raised on a 404 response, usually because of an unknown resource ID."""


class TransportError(SL1ApiError):
	"""Raised on connection failures, unexpected HTTP status codes and bodies that are not valid JSON."""


class RedirectError(TransportError):
	"""Raised when the API responds with a redirect, which is never followed."""

	@property
	def location(self):
		"""The Location header of the redirect response, or None."""
		try:
			return self.response.headers.get("Location")
		except AttributeError:
			return None


class ValidationError(SL1ApiError, ValueError):
	"""Error on invalid input (IDs, limits, resource types, ambiguous lookups, ...)."""


class FilterParsingError(ValidationError):
	"""Error on parsing a filter (wildcard pattern or operator)."""


class NoOpWarning(UserWarning):
	"""Issued when an update or create has no writable fields, so that nothing is sent."""
