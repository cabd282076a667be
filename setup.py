# SPDX-License-Identifier: Apache-2.0
from setuptools import setup, find_packages

setup(
    name="fhevm-sdk",
    version="1.0.0",
    description="Client SDK for encrypting inputs and decrypting results of FHEVM contracts",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "click",
        "eth-account>=0.10",
        "httpx",
        "limits>=3",
        "pydantic>=2",
        "pydantic-settings",
    ],
    extras_require={"test": ["pytest", "fastapi"]},
    entry_points={"console_scripts": ["fhevm=fhevmsdk.cli:main"]},
)
