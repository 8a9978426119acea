from setuptools import setup

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as f:
    requirements = [line.strip() for line in f if line.strip() and not line.startswith("#")]

setup(
    name="platform-migrator",
    version="0.1.0",
    description="Copies the platform tables between MySQL databases and rebuilds team roles",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=["core", "config", "extensions", "extensions.plugins", "tools", "utils"],
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Database",
    ],
    python_requires=">=3.11",
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "platform-migrate=tools.db_migrator:main",
        ],
    },
    include_package_data=True,
)
