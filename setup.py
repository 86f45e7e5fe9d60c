"""
Setup file.
"""

from setuptools import find_packages, setup

KEYWORDS = "kotlin kotlinc jvm build plugin incremental compiler classpath jar"


if __name__ == "__main__":
    setup(
        name="kbuild",
        version="0.1.0",
        description="Kotlin compilation plugin for build hosts",
        keywords=KEYWORDS,
        package_dir={"": "src"},
        packages=find_packages(where="src"),
        python_requires=">=3.9",
        install_requires=[
            "psutil>=5.9",
        ],
        extras_require={
            "test": [
                "pytest>=7.0",
            ],
        },
        include_package_data=True)
