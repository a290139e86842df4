import os
import sys

import setuptools

NAME = "mininest"


def get_version():
    version = {}
    path = os.path.join(os.path.dirname(__file__), NAME, "_version.py")
    with open(path, encoding="utf-8") as f:
        exec(f.read(), version)
    return version["__version__"]


# READ README.md for long description on PyPi.
try:
    long_description = open("README.md", encoding="utf-8").read()
except Exception as e:
    sys.stderr.write(f"Failed to read README.md:\n  {e}\n")
    sys.stderr.flush()
    long_description = ""


setuptools.setup(
    name=NAME,
    author="The Mininest Authors",
    description="Skilling's nested sampling in JAX",
    long_description=long_description,
    version=get_version(),
    packages=setuptools.find_packages(include=["mininest", "mininest.*"]),
    python_requires=">=3.9",
    install_requires=[
        "fastprogress>=0.2.0",
        "jax>=0.4.25",
        "jaxlib>=0.4.25",
        "numpy",
        "typing-extensions>=4.4.0",
    ],
    extras_require={
        "test": [
            "absl-py",
            "chex",
            "pytest",
        ],
    },
    long_description_content_type="text/markdown",
    keywords="nested sampling bayesian evidence statistics sampling algorithms",
    license="Apache License 2.0",
)
