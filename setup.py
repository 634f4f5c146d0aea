"""Package setup for xrpl-sale-sdk."""

from setuptools import setup

setup(
    name="xrpl-sale-sdk",
    version="1.0.0",
    description="Typed Python client for the XRPL.Sale token sale API",
    packages=["xrpl_sale_sdk"],
    python_requires=">=3.9",
    install_requires=[
        "httpx>=0.24.0",
        "pydantic>=2.0.0",
    ],
    extras_require={
        "test": ["pytest>=7.0.0"],
    },
)
