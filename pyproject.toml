[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "proxmoxve"
version = "0.12.0"
description = "Proxmox VE QEMU configuration encoding and parsing, VM request bodies, and read-only data sources for access, role and node information"
requires-python = ">=3.10"
dependencies = []
keywords = ["proxmox", "qemu", "virtualization", "infrastructure", "configuration"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["proxmoxve"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
