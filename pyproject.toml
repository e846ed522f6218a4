[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hpingkit"
version = "0.1.0"
description = "Building blocks of a packet probing tool: option parsing, packet descriptions, RTT statistics, a small bignum library and an RC4-style generator."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "networking",
    "packets",
    "tcp",
    "icmp",
    "traceroute",
    "bignum",
    "rc4",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking :: Monitoring",
    "Topic :: System :: Networking",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["hpingkit"]

[tool.hatch.build.targets.sdist]
include = ["hpingkit", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
