"""Setup script for SpaceRate Pro."""
from setuptools import setup, find_namespace_packages

setup(
    name="spacerate-pro",
    version="1.0.0",
    description="Rate management and booking price calculation for flexible workspaces",
    packages=find_namespace_packages(include=["app", "app.*"], exclude=["app.backend.tests", "app.backend.tests.*"]),
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.110",
        "uvicorn>=0.27",
        "sqlalchemy>=2.0",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "httpx>=0.26",
        ],
    },
)
