[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "saturn48"
version = "0.1.0"
description = "Register state, 48SX memory bus, device registers, LCD buffer and memory images for an HP-48 calculator emulator"
requires-python = ">=3.10"
dependencies = []
keywords = ["hp48", "saturn", "emulator", "calculator", "nibble"]
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
    "Topic :: System :: Emulators",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["saturn48"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
