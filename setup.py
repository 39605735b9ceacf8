from setuptools import setup, find_packages

setup(
    name="remote-templates",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "jinja2>=3.1.2",
        "typer>=0.9.0",
        "rich>=13.0.0",
        "pyyaml>=6.0",
        "pydantic>=2.0.0,<3.0.0",
        "aiohttp>=3.8.0",
        "requests>=2.28.0",
        "aiofiles>=22.1.0",
        "python-dotenv>=1.0.0",
        "beautifulsoup4>=4.9.3",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21.0",
            "black>=23.0",
            "isort>=5.0",
            "mypy>=1.0"
        ]
    },
    entry_points={
        "console_scripts": [
            "remote-templates=remote_templates.cli:main",
        ],
    },
    python_requires=">=3.10",
    description="Fetch named templates over HTTP, compile them once and render them by name",
    author="Your Organization",
    author_email="example@example.com",
    url="https://github.com/example/remote-templates",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
