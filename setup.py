# setup.py
from setuptools import setup, find_packages

setup(
    name="site_rank",
    version="0.1.0",
    description="Crawl a site into a link graph and rank its pages with PageRank",
    packages=find_packages(include=["site_rank", "site_rank.*"]),
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "click>=8.2",
        "numpy>=1.26",
        "pydantic>=2.5",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": ["site_rank=site_rank.cli:cli"],
    },
    python_requires=">=3.10",
)
