[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nanoactor"
version = "0.1.0"
description = "Building blocks for actors: prioritised mailboxes, single-assignment futures, reference-counted handles and a work-sharing scheduler"
requires-python = ">=3.10"
dependencies = []
keywords = ["actor", "concurrency", "futures", "scheduler", "mailbox", "message-passing"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Libraries :: Application Frameworks",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["nanoactor"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
