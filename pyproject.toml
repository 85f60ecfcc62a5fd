[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mongowire"
version = "0.1.0"
description = "Reading, writing and validating MongoDB wire protocol messages (OP_MSG, OP_QUERY, OP_REPLY)"
requires-python = ">=3.10"
dependencies = [
    "pymongo",
]
keywords = ["mongodb", "wire protocol", "bson", "op_msg", "database"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["mongowire"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
