"""Setup script for ontap-workflow package."""
from pathlib import Path
from setuptools import setup, find_packages

# Read long description from README
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

setup(
    name="ontap-workflow",
    version="1.0.0",
    description="NetApp ONTAP REST request layer for workflow automation nodes",
    packages=find_packages(exclude=["tests*"]),
    python_requires=">=3.10",
    install_requires=[
        "httpx>=0.25",
        "pydantic>=2.0",
        "structlog>=23.1",
        "python-dotenv>=1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    long_description=long_description,
    long_description_content_type="text/markdown",
)
