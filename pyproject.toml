[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "relrefl"
version = "0.1.0"
description = "Building blocks for relativistic disk reflection: Kerr physics, emissivity profiles, line transfer function integration and returning radiation."
requires-python = ">=3.10"
dependencies = ["numpy"]
keywords = ["astronomy", "x-ray", "black hole", "accretion disk", "reflection", "relativity"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Astronomy",
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = ["pytest", "numpy"]

[tool.hatch.build.targets.wheel]
packages = ["relrefl"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
