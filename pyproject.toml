[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "eathar"
version = "0.2.10"
description = "Kubernetes security information retriever: pod security, RBAC and cluster inventory checks"
requires-python = ">=3.10"
keywords = ["kubernetes", "security", "rbac", "pod-security-standards", "audit"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Information Technology",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security",
    "Topic :: System :: Systems Administration",
]
dependencies = [
    "requests",
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["eathar"]

[tool.pytest.ini_options]
addopts = "-ra"
