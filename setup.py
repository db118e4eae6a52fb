"""setuptools setup for Stillpoint.

Install for development:
    pip install -e .[test]
    python -m stillpoint --minutes 10
"""

from setuptools import setup, find_packages

setup(
    name="stillpoint",
    version="0.1.0",
    description="Restartable meditation countdown timer engine",
    python_requires=">=3.10",
    packages=find_packages(include=["stillpoint", "stillpoint.*"]),
    install_requires=[
        "PyQt6>=6.4",
        "SQLAlchemy>=2.0",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": ["stillpoint=stillpoint.__main__:main"],
    },
)
