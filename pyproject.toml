[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gokata"
version = "0.1.0"
description = "Concurrency and error-handling building blocks: a fail-fast user data aggregator, a sharded concurrent map and layered error propagation for a storage gateway."
requires-python = ">=3.11"
dependencies = []
keywords = [
    "asyncio",
    "concurrency",
    "cancellation",
    "timeout",
    "sharded-map",
    "errors",
    "exception-chaining",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
gokata-aggregate = "gokata.aggregator:main"

[tool.hatch.build.targets.wheel]
packages = ["gokata"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
