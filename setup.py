from setuptools import setup, find_packages

setup(
    name="puissance4",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "numpy",
        "gymnasium",
        "torch",  # PyTorch for the policy network
        "filelock",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
