[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "txrelay"
version = "2.0.1"
description = "Build tipped, nonce-based transaction instructions and relay signed transactions to several submission services at once"
requires-python = ">=3.10"
keywords = ["transactions", "relay", "rpc", "tips", "latency", "base58"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
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
    "httpx",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
    "respx",
]

[tool.hatch.build.targets.wheel]
packages = ["txrelay"]

[tool.pytest.ini_options]
addopts = "-ra"
