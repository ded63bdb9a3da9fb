# -*- coding: utf-8 -*-
"""
General test configuration/setup.
"""

import json
import pytest


# Connection to a real instance to test with; this is set with the CLI parameter --sl1
REAL_SL1 = {
	# True to enable tests with a real instance, is automatically set if the --sl1 CLI option is provided
	"usage": False,
	# URL for this instance
	"url": "https://sl1/api/",
	# Session parameters, e.g. verify, auth, proxies, ...
	"sessionparams": {
		"auth": ("user", "pass"),
	}
}


def pytest_addoption(parser):
	parser.addoption(
		"--sl1", default="",
		help="Configure to run tests with a real instance, JSON-encoded. "
			+ "Example: \n"
			+ '{"url": "https://sl1/api/", "sessionparams": {"auth": ["user", "pass"]}}'
	)


def pytest_configure(config):
	# Register "real" mark
	config.addinivalue_line("markers", "real: for testing with a real instance")

	# Configure real instance if set
	sl1 = config.getoption("--sl1").strip()
	if sl1:
		REAL_SL1["usage"] = True
		REAL_SL1.update(json.loads(sl1))
		# Special case: JSON doesn't know tuples, but requests expects tuples for HTTP basic auth
		if "auth" in REAL_SL1["sessionparams"]:
			REAL_SL1["sessionparams"]["auth"] = tuple(REAL_SL1["sessionparams"]["auth"])


def pytest_collection_modifyitems(items):
	# Add skip mark to tests marked with real, unless a real instance is configured
	if REAL_SL1["usage"]:
		return
	skip_real = pytest.mark.skip(reason="Skipping tests with a real instance")
	for item in items:
		if "real" in item.keywords:
			item.add_marker(skip_real)
