[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tagstudio_db"
version = "0.1.0"
description = "Read and edit TagStudio library databases: tags, aliases, entries, fields and tag searches"
requires-python = ">=3.10"
dependencies = []
keywords = ["sqlite", "database", "TagStudio", "tags"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Front-Ends",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["tagstudio_db"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
