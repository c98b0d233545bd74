"""
Setup script for DNS-Failover.
"""

from setuptools import find_namespace_packages, setup

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = fh.read().splitlines()

setup(
    name="dns-failover",
    version="0.1.0",
    description="Keep a Cloudflare DNS record pointed at a healthy server, failing over and back automatically",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_namespace_packages(include=["dns_failover", "dns_failover.*"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.12",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.11",
    install_requires=requirements,
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
            "trustme>=1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "dns-failover=dns_failover.__main__:main",
        ],
    },
    include_package_data=True,
)
