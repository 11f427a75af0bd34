from setuptools import setup, find_packages

setup(
    name="optforce",
    version="0.1",
    description="Bilevel identification of MustLL sets of reactions for the COBRApy framework",
    long_description=("Identification of pairs of reactions whose flux must be lowered in a production strain "
                      "(MustLL sets of the OptForce procedure), computed by reformulating a bilevel problem "
                      "into a single-level MILP and enumerating its solutions"),
    long_description_content_type="text/plain",
    license="Apache License 2.0",
    python_requires=">=3.7",
    packages=find_packages(include=["optforce", "optforce.*"]),
    install_requires=["cobra", "optlang", "swiglpk", "scipy", "numpy", "pandas"],
    extras_require={
        "scip": ["pyscipopt"],
        "test": ["pytest", "pytest-timeout"],
    },
    classifiers=[
        "Intended Audience :: Science/Research", "Development Status :: 3 - Alpha", "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10", "Programming Language :: Python :: 3.11", "Programming Language :: Python :: 3.12",
        "Natural Language :: English", "Operating System :: OS Independent", "Topic :: Scientific/Engineering :: Bio-Informatics"
    ],
    keywords=["metabolism", "constraint-based", "mixed-integer", "bilevel", "optforce"],
    zip_safe=False,
)
