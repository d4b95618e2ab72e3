[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "arbwatch"
version = "0.1.0"
description = "Order books, exchange message models and an arbitrage detector for crypto options, with a websocket endpoint that streams opportunities"
requires-python = ">=3.10"
keywords = ["arbitrage", "options", "order book", "websocket", "crypto", "okx", "deribit"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Financial and Insurance Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: Office/Business :: Financial :: Investment",
]
dependencies = [
    "aiohttp",
    "python-dotenv",
    "sortedcontainers",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["arbwatch"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
