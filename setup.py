from setuptools import find_packages, setup

setup(
    name="frameforest",
    version="0.1.0",
    description="Best-first decision trees over fixed-size frames of a time series",
    packages=find_packages(include=["frameforest", "frameforest.*"]),
    python_requires=">=3.10",
    install_requires=[
        "numpy",
        "torch",
        "scikit-learn",
    ],
    extras_require={
        "test": ["pytest", "pandas"],
    },
)
