# -*- coding: utf-8 -*-

# Thanks to https://packaging.python.org/tutorials/packaging-projects
# And https://github.com/pallets/flask/blob/master/setup.py
from setuptools import setup
import re

# Read the __version__ string from the __init__ file to avoid changing it here all the time
with open("sl1api_py/__init__.py", "rt") as file:
	version = re.search(r'__version__ = "(.*?)"', file.read()).group(1)

with open("README.md", "r") as fh:
	long_description = fh.read()

setup(
	name="sl1api_py",
	version=version,
	author="sl1api_py contributors",
	description="Client for the REST inventory API of ScienceLogic SL1",
	long_description=long_description,
	long_description_content_type="text/markdown",
	license="BSD 3-Clause License",
	packages=["sl1api_py"],
	python_requires=">=3.6",
	install_requires=['requests', 'urllib3'],
	tests_require=['requests', 'pytest'],
	extras_require={
		"test": ["pytest"],
		"doc": ["Sphinx"],
	},
	classifiers=[
		"Programming Language :: Python :: 3",
		"Operating System :: OS Independent",
		"Development Status :: 3 - Alpha",
		"License :: OSI Approved :: BSD License",
		"Intended Audience :: Developers",
	],
	keywords="sl1 em7 sciencelogic api library",
)
