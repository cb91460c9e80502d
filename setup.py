from setuptools import setup, find_packages
from pathlib import Path

setup(
    name="ocr_overlay",
    version=Path("./ocr_overlay/VERSION").read_text().strip(),
    packages=find_packages(include=["ocr_overlay", "ocr_overlay.*"]),
    package_data={"ocr_overlay": ["VERSION"]},
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "opencv-python",
        "matplotlib",
        "easydict",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["ocr_overlay=ocr_overlay.cli:main"],
    },
)
