from setuptools import setup, find_packages

setup(
    name="udpbroker",
    version="1.0.0",
    description="UDP topic broker with checksummed message envelopes",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "colorama",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "udpbroker-server = udpbroker.server:main",
            "udpbroker-client = udpbroker.client:main",
        ],
    },
    python_requires=">=3.10",
)
