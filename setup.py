from setuptools import setup, find_namespace_packages

setup(
    name="prosign",
    version="0.1.0",
    packages=find_namespace_packages(include=["prosign", "prosign.*"]),
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "rich",
        "requests",
        "python-dotenv",
        "toml",
        "rich-argparse",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "prosign=prosign.cli:main",
        ],
    },
)
