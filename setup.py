from setuptools import setup, find_packages

setup(
    name="hyperex",
    version="0.2.0",
    description="Hypervariable region primer-based extractor",
    author="Anicet Ebou",
    author_email="anicet.ebou@gmail.com",
    license="MIT",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["main"],
    install_requires=[
        "biopython",
        "rich",
        "tabulate",
    ],
    extras_require={
        "test": ["pytest"],
    },
    python_requires='>=3.9',
    entry_points={
        "console_scripts": [
            "hyperex=main:main",
        ]
    },
    include_package_data=True,
)
