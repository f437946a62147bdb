[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "blockui"
version = "0.1.0"
description = "Off-thread immediate-mode UI core: draw lists, glyph atlas, batching and free-form deformation"
requires-python = ">=3.10"
dependencies = [
    "pillow",
]
keywords = ["ui", "immediate-mode", "atlas", "glyph", "ffd", "verlet", "batching"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: User Interfaces",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["blockui"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
