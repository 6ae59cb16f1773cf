"""Setup configuration for link-like-diff."""

from setuptools import find_packages, setup

setup(
    name="link-like-diff",
    version="0.3.0",
    description="Master-data change detection with diff images delivered over OneBot",
    author="link-like-diff contributors",
    python_requires=">=3.11",
    packages=find_packages(where="src", include=["lldiff*"]),
    package_dir={"": "src"},
    install_requires=[
        "httpx>=0.27.0",
        "pydantic>=2.6.0",
        "pydantic-settings>=2.1.0",
        "GitPython>=3.1.40",
    ],
    entry_points={
        "console_scripts": [
            "lldiff=lldiff.cli:cli_entry",
        ],
    },
    extras_require={
        "dev": [
            "pytest>=8.0.0",
            "respx>=0.21.0",
        ],
    },
)
