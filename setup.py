"""
Setup file.
"""

import os

from setuptools import find_packages, setup

URL = "https://github.com/zackees/archresolver"
KEYWORDS = "embedded arduino library architecture build configuration microcontroller"
HERE = os.path.dirname(os.path.abspath(__file__))


if __name__ == "__main__":
    setup(
        name="archresolver",
        version="0.1.0",
        description="Resolve which Arduino library sources apply to a target architecture",
        maintainer="Zachary Vorhies",
        keywords=KEYWORDS,
        url=URL,
        python_requires=">=3.8",
        package_dir={"": "src"},
        packages=find_packages(where="src"),
        install_requires=[],
        extras_require={"test": ["pytest"]},
        entry_points={"console_scripts": ["archres=archresolver.cli:main"]},
        include_package_data=True)
