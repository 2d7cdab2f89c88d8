[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nexusnode"
version = "0.10.13"
description = "Prover node toolkit: tasks, adaptive difficulty, system metrics, session messages and a terminal dashboard."
requires-python = ">=3.10"
keywords = ["prover", "zkvm", "node", "dashboard", "keccak", "metrics"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering",
]
dependencies = [
    "pycryptodome",
    "psutil",
    "rich",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[project.scripts]
nexusnode-fib = "nexusnode.fib:main"

[tool.hatch.build.targets.wheel]
packages = ["nexusnode"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
ignore_missing_imports = true
