[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sponge"
version = "0.1.0"
description = "Building blocks for a user-space TCP/IP stack: byte streams, buffers, network parsing, sockets and an event loop"
requires-python = ">=3.10"
dependencies = []
keywords = ["tcp", "networking", "sockets", "byte-stream", "event-loop", "checksum"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
    "Topic :: Internet",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
webget = "sponge.webget:main"

[tool.hatch.build.targets.wheel]
packages = ["sponge"]

[tool.pytest.ini_options]
addopts = "-ra"
