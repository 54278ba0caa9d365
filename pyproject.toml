[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "minios"
version = "0.1.0"
description = "A small simulated multi-user shell over a virtual directory tree kept in plain text files"
requires-python = ">=3.10"
dependencies = []
keywords = ["shell", "simulation", "filesystem", "education", "rle"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Shells",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
minios = "minios.shell:main"

[tool.hatch.build.targets.wheel]
packages = ["minios"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
