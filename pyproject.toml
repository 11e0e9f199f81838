[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tldtrack"
version = "0.1.0"
description = "Median-flow bounding-box tracking and sliding-window detector stages for greyscale images"
requires-python = ">=3.10"
keywords = [
    "tracking",
    "tld",
    "median-flow",
    "optical-flow",
    "lucas-kanade",
    "random-ferns",
    "computer-vision",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Image Recognition",
]
dependencies = [
    "numpy",
    "scipy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["tldtrack"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
