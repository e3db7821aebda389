[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cityreports"
version = "0.1.0"
description = "Command-line tools for filing, listing and scoring city district inspection reports"
requires-python = ">=3.10"
dependencies = []
keywords = ["reports", "districts", "inspection", "monitor", "cli"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
city-manager = "cityreports.manager:main"
city-scorer = "cityreports.scorer:main"
city-monitor = "cityreports.monitor:main"
city-hub = "cityreports.hub:main"

[tool.hatch.build.targets.wheel]
packages = ["cityreports"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
