[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kafkastate"
version = "0.1.0"
description = "Kafka client statistics parsing, offsets and topic partition lists in plain Python"
requires-python = ">=3.10"
dependencies = []
keywords = ["kafka", "statistics", "offsets", "topic", "partition", "timeout"]
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
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["kafkastate"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
