[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hbasekit"
version = "0.1.0"
description = "HBase client building blocks: scan filters and comparators, a filter expression parser, region caches and snappy cell-block compression"
requires-python = ">=3.10"
dependencies = [
    "sortedcontainers",
]
keywords = ["hbase", "filter", "protobuf", "snappy", "region", "cache"]
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
    "Topic :: Database :: Front-Ends",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
    "hypothesis",
]

[tool.hatch.build.targets.wheel]
packages = ["hbasekit"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
