"""Setup script for the contest logger."""

from setuptools import find_packages, setup

setup(
    name="contest-logger",
    version="0.1.0",
    description="Contest QSO entry with duplicate checking and an append-only logbook",
    packages=find_packages(include=["contest_logger", "contest_logger.*"]),
    python_requires=">=3.11",
    install_requires=[
        "sqlmodel>=0.0.14,<0.0.49",
        "platformdirs>=3.0",
        "typer>=0.9",
        "rich>=13.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "contest-logger=contest_logger.cli:main",
        ],
    },
    zip_safe=False,
)
