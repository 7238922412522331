"""setuptools / py2app setup for IntervalTimer.

Install for development:
    pip install -e ".[test]"

Build a macOS .app bundle:
    pip install py2app
    python setup.py py2app
"""

import sys

from setuptools import find_packages, setup

APP = ["main.py"]
OPTIONS = {
    "argv_emulation": False,
    "iconfile": None,
    "plist": {
        "CFBundleName": "IntervalTimer",
        "CFBundleDisplayName": "Interval Timer",
        "CFBundleIdentifier": "com.intervaltimer.app",
        "CFBundleVersion": "0.1.0",
        "CFBundleShortVersionString": "0.1.0",
        "NSHighResolutionCapable": True,
        "LSMinimumSystemVersion": "13.0",
    },
}

extra = {}
if "py2app" in sys.argv:
    extra = dict(
        app=APP,
        data_files=[],
        options={"py2app": OPTIONS},
        setup_requires=["py2app"],
    )

setup(
    name="IntervalTimer",
    version="0.1.0",
    packages=find_packages(include=["intervaltimer", "intervaltimer.*"]),
    python_requires=">=3.10",
    install_requires=[
        "PyQt6>=6.5",
        "numpy",
        "loguru",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["intervaltimer=intervaltimer.__main__:main"],
    },
    **extra,
)
