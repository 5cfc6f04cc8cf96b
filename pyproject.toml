[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "obccam"
version = "0.1.0"
description = "On-board computer side of a CAN bus camera link: commands, acknowledgements and image/video transfer"
requires-python = ">=3.10"
dependencies = []
keywords = ["can", "socketcan", "camera", "obc", "embedded"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Embedded Systems :: Controller Area Network (CAN)",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
obccam = "obccam.cli:main"
obccam-controller = "obccam.controller:main"

[tool.hatch.build.targets.wheel]
packages = ["obccam"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
