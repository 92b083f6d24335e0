"""Setup configuration for cc-cli package."""

from setuptools import setup, find_packages
from pathlib import Path

# Read README for long description
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

setup(
    name="cc-cli",
    version="0.2.0",
    author="CC CLI Contributors",
    description="Run local LLMs with Ollama and size cloud instances for them",
    long_description=long_description,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.11",
    install_requires=[
        "requests>=2.32.3",
        "pydantic>=2.9.0",
        "psutil>=5.9.0",
        "rich>=13.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=8.3.3",
            "pytest-cov>=5.0.0",
            "mypy>=1.11.2",
            "black>=24.8.0",
            "ruff>=0.6.9",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Topic :: Scientific/Engineering :: Artificial Intelligence",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.12",
    ],
    entry_points={
        "console_scripts": [
            "cc=cc_cli.cli.main:main",
            "cc-login=cc_cli.cli.login_cli:main",
            "cc-cloud=cc_cli.cli.cloud_cli:main",
            "cc-analyze-hardware=cc_cli.cli.hardware_cli:main",
            "cc-optimize=cc_cli.cli.optimize_cli:main",
            "cc-install-cloud-deps=cc_cli.cli.install_cli:main",
            "cc-test-models=cc_cli.cli.benchmark_cli:main",
        ],
    },
)
