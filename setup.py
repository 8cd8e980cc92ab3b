# ============================================
# enetpath - setup.py
# Python packaging setup
# ============================================

import re
from pathlib import Path
from setuptools import setup, find_packages

# Read version from the package
def get_version():
    """Get version from src/enetpath/__init__.py or fallback to default"""
    init_path = Path(__file__).parent / "src" / "enetpath" / "__init__.py"
    if init_path.exists():
        match = re.search(r'^__version__ = "([^"]+)"', init_path.read_text(encoding="utf-8"), re.M)
        if match:
            return match.group(1)
    return "1.0.0"

# Read README for long description
def get_long_description():
    """Get long description from README.md"""
    readme_path = Path(__file__).parent / "README.md"
    if readme_path.exists():
        with open(readme_path, "r", encoding="utf-8") as f:
            return f.read()
    return "Elastic-net regularization paths with cross-validated model selection"

# Read requirements.txt
def get_requirements():
    """Parse requirements.txt for dependencies"""
    requirements_path = Path(__file__).parent / "requirements.txt"
    requirements = []

    if requirements_path.exists():
        with open(requirements_path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                # Skip comments and empty lines
                if line and not line.startswith("#"):
                    # Handle inline comments
                    if "#" in line:
                        line = line.split("#")[0].strip()
                    if not line.startswith("-"):
                        requirements.append(line)

    return requirements

# Test dependencies
def get_test_requirements():
    """Get test dependencies"""
    return [
        "pytest>=8.3.2",
        "pytest-cov>=5.0.0",
        "pytest-mock>=3.14.0",
    ]

# Development dependencies
def get_dev_requirements():
    """Get development dependencies"""
    return get_test_requirements() + [
        "black>=24.8.0",
        "isort>=5.13.2",
        "flake8>=7.1.1",
        "mypy>=1.11.2",
    ]

# Optional dependencies
extras_require = {
    "test": get_test_requirements(),
    "dev": get_dev_requirements(),
}

# Package configuration
setup(
    name="enetpath",
    version=get_version(),
    description="Elastic-net coordinate descent paths with k-fold cross-validation and alpha grid search",
    long_description=get_long_description(),
    long_description_content_type="text/markdown",

    # Package discovery
    packages=find_packages(where="src"),
    package_dir={"": "src"},

    # Python version requirement
    python_requires=">=3.10",

    # Dependencies
    install_requires=get_requirements(),
    extras_require=extras_require,

    # Entry points for CLI commands
    entry_points={
        "console_scripts": [
            "enetpath=enetpath.cli:main",
        ],
    },

    # Classification metadata
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Scientific/Engineering :: Mathematics",
        "Topic :: Scientific/Engineering :: Artificial Intelligence",
    ],

    keywords=[
        "elastic-net", "lasso", "ridge", "coordinate-descent",
        "cross-validation", "regularization-path", "regression"
    ],

    license="MIT",
    zip_safe=False,
)
