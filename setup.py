from __future__ import annotations

from setuptools import find_packages, setup  # type: ignore


setup(
    name="fusion-proxy",
    version="0.1.0",
    description="DEX aggregation API proxy with an in-memory cross-chain swap secret registry",
    python_requires=">=3.10",
    package_dir={"": "src"},
    packages=find_packages("src"),
    install_requires=[
        "fastapi>=0.100",
        "uvicorn>=0.23",
        "httpx>=0.24",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": [
            "fusion-proxy=fusion_proxy.__main__:main",
        ],
    },
)
