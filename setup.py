"""
Setup script for the ShopSavvy Data API Python SDK.

Notes
-----
- Reads long description and requirements from adjacent files for clarity.
- Declares optional extras for development and examples.
- Packages typed hints via ``py.typed`` (ensure the marker file exists).
"""
from setuptools import setup, find_packages

# Long description for PyPI project page
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Base runtime requirements
with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="shopsavvy-data-api",
    version="1.0.0",
    author="ShopSavvy",
    author_email="business@shopsavvy.com",
    description="Python SDK for the ShopSavvy Data API",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://shopsavvy.com/data",
    packages=find_packages(exclude=["tests", "tests.*", "examples"]),  # discovers "shopsavvy"
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Topic :: Internet :: WWW/HTTP",
        "Topic :: Office/Business",
    ],
    keywords=[
        "shopsavvy", "ecommerce", "products", "prices", "offers",
        "price-history", "api", "sdk",
    ],
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "dev": [
            "pytest>=7.0",
            "black>=23.0",
            "mypy>=1.0",
            "pytest-asyncio>=0.21",
            "pytest-cov>=4.0",
        ],
        "examples": [
            "matplotlib>=3.5",
        ],
    },
    package_data={
        # Include typing marker for PEP 561
        "shopsavvy": ["py.typed"],
    },
    include_package_data=True,
    zip_safe=False,
)
