from setuptools import find_packages, setup

setup(
    name="hooker",
    version="0.1.0",
    description="Prioritized hook registry with completion tracking and deadlines",
    packages=find_packages(include=["hooker", "hooker.*"]),
    include_package_data=True,
    python_requires=">=3.11",
    install_requires=[
        "pydantic>=2",
        "PyYAML>=6",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
)
