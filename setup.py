"""Setup configuration for RulesBot Discord Bot."""

from setuptools import setup, find_packages

setup(
    name="rulesbot",
    version="0.1.0",
    description="A Discord bot that periodically posts server rules from an editable outline",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.11",
    install_requires=[
        "py-cord>=2.6",
        "PyYAML>=6.0",
        "prompt_toolkit>=3.0",
        "aiohttp>=3.9",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "rulesbot=rulesbot.main:main",
        ],
    },
)
