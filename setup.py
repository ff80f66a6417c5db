import os
from setuptools import setup, find_packages

with open(
    os.path.join(
        os.path.dirname(os.path.realpath(__file__)), "remotekv", "requirements.txt"
    )
) as f:
    requirements = f.read().splitlines()

setup(
    name="remotekv",
    version="0.1.0",
    description="Async client for remote key-value namespaces",
    packages=find_packages(include=["remotekv", "remotekv.*"]),
    package_data={"remotekv": ["requirements.txt"]},
    install_requires=requirements,
    extras_require={"test": ["pytest", "respx"]},
    entry_points={
        "console_scripts": [
            "rkv = remotekv.cli:rkv",
        ],
    },
)
