from setuptools import setup, find_packages

setup(
    name="tidal_flood_dashboard",
    version="0.1.0",
    description="Tidal flood-stage dashboard combining USGS, NOAA CO-OPS and NWS feeds",
    author="RPA",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.9",
    install_requires=[
        "requests>=2.31.0",
        "pandas>=2.0.0",
        "pyyaml>=6.0.0",    # For YAML configuration files
        "matplotlib>=3.7.0", # For the water-level chart
    ],
    extras_require={
        'dev': [
            'pytest>=7.0.0',
            'responses>=0.23.0',
            'black>=23.0.0',
            'flake8>=6.0.0',
            'mypy>=1.0.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'tide-dashboard=tidal_dashboard.dashboard_cli:main',
            'build-nwps-forecast=tidal_dashboard.forecast_cli:main',
        ],
    },
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Science/Research',
        'Topic :: Scientific/Engineering :: Hydrology',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
    ],
)
