[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ambulance-webapi"
version = "1.0.0"
description = "HTTP API for managing ambulance waiting lists backed by MongoDB"
requires-python = ">=3.10"
keywords = ["ambulance", "waiting-list", "rest", "flask", "mongodb"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Web Environment",
    "Framework :: Flask",
    "Intended Audience :: Healthcare Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]
dependencies = [
    "flask",
    "pymongo",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
ambulance-api-service = "ambulance_webapi.main:main"

[tool.hatch.build.targets.wheel]
packages = ["ambulance_webapi"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
