[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pimsim"
version = "0.1.0"
description = "Cycle-level building blocks for simulating DRAM channels with processing-in-memory units"
requires-python = ">=3.10"
keywords = ["dram", "memory", "simulator", "pim", "fp16", "address-mapping", "scheduler"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: System :: Emulators",
    "Topic :: Scientific/Engineering",
]
dependencies = [
    "numpy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["pimsim"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
