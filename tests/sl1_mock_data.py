# -*- coding: utf-8 -*-
"""
Data for sl1_mock.
"""

import base64
import json

# Defaults
DEFAULTS = {
	"auth": f"Basic {base64.b64encode(b'user:pass').decode('utf-8')}"  # "Basic dXNlcjpwYXNz"
}

# Errors
ERRORS = {
	400: {
		"reason": "Bad request"
	},
	401: {
		"reason": "Unauthorized",
		"headers": {"WWW-Authenticate": "Basic realm=\"EM7 API\""},
		"body": "<h1>Unauthorized. Please check your user credentials.</h1>"
	},
	403: {
		"reason": "Forbidden",
		"body": "<h1>Forbidden.</h1>"
	},
	404: {
		"reason": "Not Found",
		"body": json.dumps({"error": 404, "status": "The requested resource could not be found in the mocked API."}),
	},
}


def get_error(status_code):
	err = dict(ERRORS.get(status_code, dict()))
	err["status_code"] = status_code
	return err


#: Number of devices in the mocked inventory
DEVICE_COUNT = 230
#: Number of organizations, devices are distributed round robin
ORGANIZATION_COUNT = 6


def device_name(i):
	"""Every tenth device is a web server."""
	return f"web-{i:03d}" if i % 10 == 0 else f"device-{i:03d}"


def generate_resources():
	"""Generate the mocked inventory: resource type -> ID -> object."""
	organizations = {
		i: {"company": f"Organization {i}", "state": "PA" if i % 2 else "NY", "city": "Anytown"}
		for i in range(1, ORGANIZATION_COUNT + 1)
	}
	device_categories = {
		1: {"name": "Servers", "description": "Physical and virtual servers"},
		2: {"name": "Network.Switches", "description": "Switches"},
	}
	device_classes = {
		i: {
			"class": f"Class {i}",
			"description": f"Device class {i}",
			"device_category": f"/api/device_category/{i % 2 + 1}",
		}
		for i in range(1, 5)
	}
	devices = {
		i: {
			"name": device_name(i),
			"ip": f"10.0.{i // 200}.{i % 200}",
			"organization": f"/api/organization/{i % ORGANIZATION_COUNT + 1}",
			"class_type": f"/api/device_class/{i % 4 + 1}",
			"state": i % 3,
		}
		for i in range(1, DEVICE_COUNT + 1)
	}
	# A link to nowhere for failing expansion
	devices[7]["class_type"] = "/api/device_class/999"
	device_groups = {
		1: {"name": "Web Servers", "devices": ["/api/device/42", "/api/device/43"], "groups": []},
		2: {"name": "Databases", "devices": [], "groups": []},
		3: {"name": "Duplicate", "devices": ["/api/device/1"], "groups": []},
		4: {"name": "Duplicate", "devices": [], "groups": ["/api/device_group/1"]},
	}
	alerts = {
		i: {
			"message": f"Alert {i}",
			"aligned_resource": f"/api/device/{i}",
			"organization": f"/api/organization/{i % ORGANIZATION_COUNT + 1}",
			"severity": i % 5,
		}
		for i in range(1, 11)
	}
	return {
		"organization": organizations,
		"device_category": device_categories,
		"device_class": device_classes,
		"device": devices,
		"device_group": device_groups,
		"alert": alerts,
	}


RESOURCES = generate_resources()
