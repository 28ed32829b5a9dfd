[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "neoheap"
version = "0.1.0"
description = "A boundary-tag heap allocator that manages chunks inside a byte buffer"
requires-python = ">=3.10"
dependencies = []
keywords = ["allocator", "heap", "malloc", "memory", "free-list"]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
neoheap-demo = "neoheap.demo:main"

[tool.hatch.build.targets.wheel]
packages = ["neoheap"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
