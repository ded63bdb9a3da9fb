# -*- coding: utf-8 -*-
"""This module contains classes essential for sending requests and receiving responses.

The classes are used in the essential :mod:`sl1api_py.api` module as requests to and responses from the API. A request
is always sent with the session (:class:`sl1api_py.api.API`) it was created with, so authentication, default headers,
TLS verification and proxies of the session apply. Redirects are never followed: the API uses redirects to point to the
canonical URI of a resource, which is treated as an error instead of silently requesting something else.
"""

import logging
import collections.abc
import warnings

import requests
from requests import Request, Response

from . import exceptions
from .results import Page

LOGGER = logging.getLogger(__name__)


class APIRequest(Request):
	"""Specialised request with all data that may be sent in a ``requests.PreparedRequest`` to the API.

	Mainly, objects of this class have the following features:

	- On prepare(), the APIRequest is prepared using an API object (which is a ``requests.Session``)
	- The APIRequest gets prepared and sent when the object gets called (which will also return an appropriate \
		response of course).
	- Only a JSON body is sent, ``data`` and ``files`` are ignored.
	"""

	#: All request attributes any object of this class has
	attrs = ("method", "url", "headers", "params", "auth", "cookies", "hooks", "json")

	def __init__(self, api, method="GET", url=None, json=None, headers=None, auth=None, cookies=None, hooks=None):
		"""Initiation requires an API client instance, the other init parameters are passed on to ``requests.Request``.

		:param api: API object, used to prepare and send the request (using the requests Session feature)
		:param method: HTTP method, GET or POST for this API
		:param url: Full request URL
		:param json: Body to JSON-encode
		:param headers: Request headers
		:param auth: auth handler or (user, pass) tuple
		:param cookies: dictionary or CookieJar to attach to the request
		:param hooks: dictionary of callback hooks
		"""
		super().__init__(
			method=(method or "GET").upper(),
			url=url,
			# Pass the json body, it's used as long as files and data are empty
			json=json,
			headers=headers,
			auth=auth,
			cookies=cookies,
			hooks=hooks
		)

		#: The API client is supposed to be a api.API instance, which inherits from requests.Session
		self.api = api

	@property
	def data(self):
		"""Always return empty data to avoid weird behavior."""
		return []

	@data.setter
	def data(self, data):
		"""Do nothing because only a json body is used for an APIRequest.

		It still is implemented to be compatible with the :class:`requests.Request` parent class.
		"""
		if data:
			warnings.warn(f"{self.__class__.__name__} object ignores when 'data' is set", Warning)

	@property
	def files(self):
		"""Always return no files to avoid weird behavior."""
		return []

	@files.setter
	def files(self, files):
		"""Do nothing because only a json body is used for an APIRequest.

		It still is implemented to be compatible with the :class:`requests.Request` parent class.
		"""
		if files:
			warnings.warn(f"{self.__class__.__name__} object ignores when 'files' is set", Warning)

	def clone(self) -> "APIRequest":
		"""Clone this APIRequest."""
		request = self.__class__(self.api)
		for attr in self.attrs:
			val = getattr(self, attr)
			# Copy Mappings (e.g. headers)
			val = dict(val) if isinstance(val, collections.abc.Mapping) else val
			setattr(request, attr, val)
		return request

	def __eq__(self, other):
		"""True if all attributes of these two APIRequests are the same."""
		return all((getattr(self, attr, None) == getattr(other, attr, None) for attr in self.attrs))

	def prepare(self):
		"""Construct a requests.PreparedRequest with the API (client) session."""
		return self.api.prepare_request(self)

	def send(self, params=None) -> "APIResponse":
		"""Send this request.

		The request gets prepared before sending, redirects are not followed.
		The returned response is created via create_response() of the API object.

		:param params: Parameters (as a mapping) to merge into the URL parameters.
		:return: A response created by create_response() of the API object.
		:raises TransportError: if the request could not be sent or no response was received
		"""
		if params:
			# Update URL parameters (optional)
			self.params.update(params)
		LOGGER.debug("API %s request to %s with %s", self.method, self.url, self.json)
		# Get a prepared request
		request = self.prepare()
		# Take environment variables into account (especially for proxies...)
		settings = self.api.merge_environment_settings(request.url, {}, None, None, None)
		try:
			r = self.api.send(request, allow_redirects=False, timeout=self.api.timeout, **settings)
		except requests.RequestException as exc:
			raise exceptions.TransportError(f"{self.method} {request.url} failed: {exc}", url=request.url) from exc
		return self.api.create_response(r)

	def __call__(self, *args, **params):
		"""Send this request, see send()."""
		return self.send(params)


class APIResponse:
	"""Represents a response from the API.

	This is basically just a wrapper for ``requests.Response``, adding only minor features: mapping of the HTTP status
	to this package's exceptions, strict JSON decoding and unrolling the data to a :class:`sl1api_py.results.Page`.
	"""

	def __init__(self, response: Response):
		#: The :class:`requests.Response` this APIResponse wraps
		self.response = response

	def __getattr__(self, item):
		"""Get an attribute of the response."""
		return getattr(self.response, item)

	def __eq__(self, other):
		"""Check whether this response has the same url, status_code, reason, headers and content as other."""
		try:
			# Attributes and properties to compare
			attrs = ("url", "status_code", "reason", "headers", "content")
			for attr in attrs:
				if getattr(self, attr) != getattr(other, attr):
					return False
		except AttributeError:
			return NotImplemented
		else:
			return True

	def check(self) -> "APIResponse":
		"""Raise the appropriate exception for an unsuccessful response, return self otherwise.

		:raises AuthenticationError: on 401 and 403
		:raises NotFoundError: on 404
		:raises RedirectError: on any redirect
		:raises TransportError: on any other status that is not 2xx
		"""
		status = self.status_code
		kwargs = {"status_code": status, "response": self, "url": self.url}
		if 200 <= status < 300:
			return self
		if status in (401, 403):
			raise exceptions.AuthenticationError(f"Not authorized ({status}) for {self.url}", **kwargs)
		if status == 404:
			raise exceptions.NotFoundError(f"No such resource: {self.url}", **kwargs)
		if 300 <= status < 400:
			location = self.headers.get("Location")
			raise exceptions.RedirectError(f"Refusing to follow redirect from {self.url} to {location}", **kwargs)
		raise exceptions.TransportError(f"Unexpected response {self}", **kwargs)

	def json(self, **kwargs):
		"""JSON decoded content of the response.

		:raises TransportError: if the content is not valid JSON
		"""
		try:
			return self.response.json(**kwargs)
		except ValueError as exc:
			# No valid JSON encoding
			raise exceptions.TransportError(
				f"Response from {self.url} is not valid JSON", status_code=self.status_code, response=self,
				url=self.url
			) from exc

	def page(self, **kwargs) -> Page:
		"""Unroll the JSON decoded content to a Page of records."""
		return Page.from_json(self.json(**kwargs))

	def __str__(self):
		"""Simple string representation."""
		status = f"{self.status_code} ({self.reason})" if self.reason else self.status_code
		return f"<{self.__class__.__name__} {status} for {self.url}>"
