from setuptools import setup, find_packages

# Core dependencies (always required)
install_requires = [
    "PyMySQL>=1.1.0,<2.0.0",
    "psycopg[binary]>=3.1.0,<4.0.0",
    "python-dotenv>=1.0.0,<2.0.0",
]

# Optional dependencies
extras_require = {
    "sqlalchemy": ["SQLAlchemy>=2.0.0,<3.0.0"],
    "test": ["pytest>=7.0.0", "SQLAlchemy>=2.0.0,<3.0.0"],
    "all": ["SQLAlchemy>=2.0.0,<3.0.0"],  # Install all optional dependencies
}

setup(
    name="dbsource",
    version="1.0.0",
    description="Resolve named database sources from INI files into DSNs and connections",
    packages=find_packages(),
    include_package_data=True,
    package_data={
        'dbsource': [
            'connection/driver_map.json',
        ],
    },
    install_requires=install_requires,
    extras_require=extras_require,
    python_requires=">=3.10",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
