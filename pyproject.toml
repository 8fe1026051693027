[build-system]
requires = ["setuptools>=64"]
build-backend = "setuptools.build_meta"

[project]
name = "actionscan"
version = "1.7.0"
description = "Static analysis building blocks for GitHub Actions workflows and actions"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = ["github-actions", "static-analysis", "security", "workflows"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security",
    "Topic :: Software Development :: Quality Assurance",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.setuptools.packages.find]
include = ["actionscan*"]

[tool.pytest.ini_options]
addopts = "-ra"
