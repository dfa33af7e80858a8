from setuptools import find_packages, setup

setup(
    name="streamreport",
    version="0.1.0",
    description="Streaming diagnostics and live progress rows for command-line tools",
    python_requires=">=3.10",
    packages=find_packages(include=["streamreport", "streamreport.*"]),
    install_requires=["tracerite"],
    extras_require={"test": ["pytest", "pytest-asyncio"]},
    entry_points={"console_scripts": ["streamreport=streamreport.cli:main"]},
)
