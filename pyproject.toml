[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gbsplayer"
version = "0.1.0"
description = "Game Boy sound player building blocks: memory mappers, MIDI, VGM and WAV writers, playlists and band-limited impulse tables"
requires-python = ">=3.10"
dependencies = []
keywords = ["gameboy", "gbs", "chiptune", "midi", "vgm", "wav", "audio"]
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
    "Topic :: Multimedia :: Sound/Audio :: Players",
    "Topic :: Multimedia :: Sound/Audio :: MIDI",
    "Topic :: System :: Emulators",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
gbsplayer-gen-impulse = "gbsplayer.impulsegen:main"

[tool.hatch.build.targets.wheel]
packages = ["gbsplayer"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
