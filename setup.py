"""Setup script for the lab-ops package following Cosmic Python pattern."""

from setuptools import setup, find_namespace_packages

setup(
    name="lab-ops",
    version="1.0.0",
    description="Laboratory operations backend - user provisioning, lab orders and results",
    author="Lab Operations Team",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["shared*", "accounts*", "orders*"]),
    py_modules=["config"],
    python_requires=">=3.11",
    install_requires=[
        "fastapi",
        "uvicorn[standard]",
        "pydantic>=2",
        "sqlalchemy>=2,<2.1",
        "psycopg2-binary",
        "bcrypt",
        "email-validator",
        "jinja2",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-cov",
            "httpx",
        ],
        "dev": [
            "black",
            "flake8",
            "mypy",
            "pre-commit",
        ],
    },
    entry_points={
        "console_scripts": [
            "lab-ops-accounts=accounts.entrypoints.accounts_api:main",
            "lab-ops-orders=orders.entrypoints.orders_api:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Healthcare Industry",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.11",
        "Topic :: Scientific/Engineering :: Medical Science Apps.",
    ],
)
