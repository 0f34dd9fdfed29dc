[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "metamcp"
version = "0.1.0"
description = "JSON-RPC 2.0 messages, codec and MCP handshake helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["json-rpc", "jsonrpc", "mcp", "model-context-protocol", "protocol"]
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

[tool.hatch.build.targets.wheel]
packages = ["metamcp"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
