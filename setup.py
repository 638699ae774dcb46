# setup.py
from setuptools import setup, find_packages

install_requires = [
    # --- DOMAIN & SETTINGS ---
    "pydantic>=2.0.0",
    "pyyaml>=6.0.0",
    "python-dotenv>=1.0.0",

    # --- STORAGE ---
    # Backend for the embedded target; desktop uses YAML, memory uses a mapping
    "duckdb>=0.10.0",

    # --- TESTS---
    "pytest-asyncio>=1.0.0",
    "pytest",
]

setup(
    name="vess-field-core",
    version="0.3.0",
    description="VESS soil structure evaluation core: config store, state controller and scoring",
    packages=find_packages(include=["vess", "vess.*"]),
    include_package_data=True,
    install_requires=install_requires,
    python_requires=">=3.11",
)
