"""
Setup script for the mood journal data layer
Install with: pip install -e .
"""

from setuptools import setup, find_namespace_packages
from pathlib import Path

# Read README for long description
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

# Read requirements
requirements_file = Path(__file__).parent / "requirements.txt"
requirements = []
if requirements_file.exists():
    with open(requirements_file, 'r', encoding='utf-8') as f:
        requirements = [
            line.strip()
            for line in f
            if line.strip() and not line.startswith('#')
        ]

setup(
    name="moodnotes-data",
    version="1.0.0",
    description="Owner-scoped query, pagination and statistics layer for a PostgreSQL mood journal",
    long_description=long_description,
    long_description_content_type="text/markdown",
    # utils/ and services/ have no __init__.py
    packages=find_namespace_packages(include=["query", "query.*", "services", "services.*", "utils", "utils.*"]),
    py_modules=[
        "config",
        "container",
        "database",
        "models",
        "repositories",
    ],
    python_requires=">=3.10",
    install_requires=requirements,
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "moodnotes-init-db=utils.init_db:cli_entry",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    keywords="mood journal postgresql asyncpg pagination",
)
