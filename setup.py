from setuptools import setup, find_packages
from pathlib import Path

# Read requirements from requirements.txt
def read_requirements():
    requirements_file = Path(__file__).parent / "requirements.txt"
    if requirements_file.exists():
        with open(requirements_file) as f:
            return [line for line in f.read().splitlines() if line.strip()]
    return []

setup(
    name="pyJX",
    version="1.0.0",
    description="pyJX: Photolysis J-values for Python",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    packages=find_packages(include=["pyJX", "pyJX.*"]),
    package_data={
        "pyJX": ["data/*.csv", "data/cross_sections/*.csv"], # Fast-JX spectral data
    },
    install_requires=read_requirements(),  # Read dependencies from requirements.txt
    extras_require={
        "test": ["pytest"],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.8",
    entry_points={
        "console_scripts": [
            "pyJX=pyJX.main:main", # Execute the main function in pyJX/main.py
        ],
    },
)
