from setuptools import setup, find_packages

setup(
    name="insight-explorer",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={
        "chain": ["pools.json"],
    },
    install_requires=[
        "fastapi",
        "uvicorn",
        "pydantic>=2",
        "pydantic-settings",
        "structlog",
        "prometheus_client",
        "aiohttp"
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx"
        ],
    },
    python_requires=">=3.8",
    entry_points={
        "console_scripts": [
            "insight-explorer=explorer.server:main",
        ],
    }
)
