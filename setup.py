from setuptools import setup, find_packages

setup(
    name="portfolio-calculator",
    version="1.0.0",
    author="Portfolio Calculator Team",
    description="Scenario, exit and whole-share rebalance calculations for portfolio snapshots",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    package_data={
        "portfolio_calculator": ["py.typed"],
        "calculator_config": ["py.typed"],
    },
    install_requires=[
        "pydantic==2.11.7",
        "PyYAML>=6.0",
        "fastapi>=0.115",
        "uvicorn>=0.30",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "httpx>=0.27",
        ],
    },
    python_requires=">=3.11",
)
