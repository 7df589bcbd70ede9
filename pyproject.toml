[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "endpoint"
version = "0.1.0"
description = "A small interactive shell that doubles as a TCP or UNIX-socket client or an upper-casing echo server"
requires-python = ">=3.10"
dependencies = []
keywords = ["shell", "socket", "client", "server", "unix", "tcp", "echo"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
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
endpoint = "endpoint.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["endpoint"]

[tool.pytest.ini_options]
addopts = "-ra"
