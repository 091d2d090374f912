#!/usr/bin/env python
"""
Setup script for the Budget Insights package.
"""

from setuptools import setup, find_packages

# Core dependencies required for the package
requirements = [
    "pandas>=1.1.0",
    "numpy>=1.18.0",
    "jinja2>=2.11.0",
    "pyyaml>=5.1.0",
    # Spreadsheet engines used by pandas.read_excel
    "openpyxl>=3.0.0",
    "xlrd>=2.0.1",
]

setup(
    name="budget_insights",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=requirements,
    extras_require={
        "dev": ["pytest>=6.0.0", "pytest-cov>=2.10.0", "black>=20.8b1"],
    },
    entry_points={
        "console_scripts": [
            "budget-insights=budget_insights.cli:main",
        ],
    },
    package_data={
        "budget_insights": ["configs/*.yaml"],
    },
    description="Question answering over budget vs actual spreadsheets",
    author="Analytics Team",
    author_email="analytics@example.com",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Financial and Insurance Industry",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
    ],
    python_requires=">=3.8",
    include_package_data=True,
)
