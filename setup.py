"""
Build script for postrender.

Usage:
    # Regular install
    pip install .

    # Editable install with the test runner
    pip install -e ".[test]"
"""

from pathlib import Path

from setuptools import find_packages, setup

README = Path(__file__).parent / "README.md"


if __name__ == "__main__":
    setup(
        name="postrender",
        version="0.1.0",
        description="Post-render page transforms and search index builder for static documentation sites",
        long_description=README.read_text(encoding="utf-8") if README.exists() else "",
        long_description_content_type="text/markdown",
        python_requires=">=3.10",
        package_dir={"": "src"},
        packages=find_packages("src"),
        install_requires=[
            "justhtml>=0.40,<1.0",
            "lunr",
            "Pygments",
        ],
        extras_require={
            "test": ["pytest"],
        },
        entry_points={
            "console_scripts": ["postrender=postrender.cli:main"],
        },
    )
