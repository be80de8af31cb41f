[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "atomicrmw"
version = "0.1.0"
description = "Compare-and-swap read-modify-write with escalating busy-wait, nanosecond timers and a two-thread contention benchmark"
requires-python = ">=3.10"
dependencies = []
keywords = ["atomic", "compare-and-swap", "read-modify-write", "benchmark", "busy-wait", "timer"]
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
    "Topic :: System :: Benchmark",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
atomicrmw = "atomicrmw.main:main"

[tool.hatch.build.targets.wheel]
packages = ["atomicrmw"]

[tool.pytest.ini_options]
addopts = "-ra"
