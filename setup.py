from setuptools import setup, find_packages

setup(
    name="basketball-scraper",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "pandas>=1.3.0",
        "pydantic>=2.0",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "bballscraper=bballscraper.cli:main",
        ],
    },
    description="CSV export layer for scraped basketball results, stats, odds and lineups",
)
