[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "goblin"
version = "0.1.0"
description = "Heist and race mini-games for chat communities, with an in-memory document store and credit ledger."
requires-python = ">=3.10"
dependencies = []
keywords = ["game", "heist", "race", "chat", "bot", "economy"]
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
    "Topic :: Games/Entertainment",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["goblin"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
