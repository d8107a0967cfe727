[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tinyunix"
version = "0.1.0"
description = "A small Unix userland: cat, grep, wc, ls, simple shells, stress tools and the helpers they share"
requires-python = ">=3.10"
dependencies = []
keywords = ["unix", "shell", "coreutils", "grep", "wc", "elf", "teaching"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Utilities",
    "Topic :: System :: Shells",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
tu-cat = "tinyunix.cat:main"
tu-grep = "tinyunix.grep:main"
tu-wc = "tinyunix.wc:main"
tu-ls = "tinyunix.ls:main"
tu-echo = "tinyunix.coreutils:echo_main"
tu-kill = "tinyunix.coreutils:kill_main"
tu-ln = "tinyunix.coreutils:ln_main"
tu-mkdir = "tinyunix.coreutils:mkdir_main"
tu-rm = "tinyunix.coreutils:rm_main"
tu-sleep = "tinyunix.coreutils:sleep_main"
tu-grind = "tinyunix.grind:main"
tu-forktest = "tinyunix.stress:forktest_main"
tu-stressfs = "tinyunix.stress:stressfs_main"
tu-logstress = "tinyunix.stress:logstress_main"
tu-zombie = "tinyunix.stress:zombie_main"
tu-dorphan = "tinyunix.stress:dorphan_main"
tu-forphan = "tinyunix.stress:forphan_main"
tu-sh = "tinyunix.sh:main"
tu-myshell = "tinyunix.myshell:main"
tu-smash = "tinyunix.smash:main"

[tool.hatch.build.targets.wheel]
packages = ["tinyunix"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
