from setuptools import find_packages, setup

setup(
    name="rawgrid",
    version="0.1.0",
    description="Streaming reader for raw, regular-grid scalar data",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.9",
    install_requires=[
        "dask[array]",
        "typing-extensions",
        "numpy>=1.14.5",
    ],
    extras_require={
        "xarray": ["xarray"],
        "test": ["psutil", "pytest", "xarray"],
    },
)
