[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "legtraj"
version = "0.1.0"
description = "Building blocks for legged-robot trajectory optimization: robot models, constraint sets, visualization helpers and a keyboard command editor"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "legged robots",
    "trajectory optimization",
    "locomotion",
    "motion planning",
    "constraints",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
legtraj-ui = "legtraj.user_interface:main"

[tool.hatch.build.targets.wheel]
packages = ["legtraj"]

[tool.pytest.ini_options]
addopts = "-ra"
