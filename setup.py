from setuptools import setup, find_packages
from pathlib import Path

setup(
    name="probe_annotation",
    version=Path("./probe_annotation/VERSION").read_text().strip(),
    packages=find_packages(include=["probe_annotation", "probe_annotation.*"]),
    package_data={"probe_annotation": ["VERSION"]},
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "opencv-python-headless",
        "easydict",
        "matplotlib",
        "requests",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["probe_annotation=probe_annotation.cli:main"],
    },
)
