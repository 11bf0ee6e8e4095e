[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rudp"
version = "0.1.0"
description = "Reliable delivery over UDP: sessions, ordering, acknowledgements, retransmission and fragmentation"
requires-python = ">=3.10"
dependencies = []
keywords = ["udp", "reliable-udp", "networking", "transport", "protocol", "fragmentation"]
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
    "Topic :: System :: Networking",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
rudp-echo-server = "rudp.echo_server:main"
rudp-echo-client = "rudp.echo_client:main"
rudp-lookup = "rudp.lookup:main"

[tool.hatch.build.targets.wheel]
packages = ["rudp"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
