from setuptools import find_packages, setup

setup(
    name="aurynx",
    version="0.1.0",
    description="Compile Aurynx component templates into PHP render closures.",
    python_requires=">=3.9",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "click>=8.1",
        "rich>=13.0",
        "rich-click>=1.7",
        "watchfiles>=0.21",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "aurynx=aurynx.cli.main:cli",
        ],
    },
    zip_safe=False,
)
