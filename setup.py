from setuptools import setup, find_packages

# Read version from __version__.py without importing the package
version_file = {}
with open("isscheck/__version__.py") as fp:
    exec(fp.read(), version_file)
__version__ = version_file['__version__']

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

python_requires = ">=3.9"

install_requires = [
    # Registry structure validation (draft 2020-12 prefixItems)
    "jsonschema>=4.0",
    # Settings model and settings file
    "pydantic>=2.0,<3.0",
    "PyYAML>=6.0",
    # Console report colours (just_fix_windows_console needs 0.4.6)
    "colorama>=0.4.6",
]

extras_require = {
    "test": [
        "pytest>=7.0",
    ],
}

classifiers = [
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3.9",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Operating System :: OS Independent",
]

setup(
    name="isscheck",
    version=__version__,
    description="Consistency checker for Inno Setup installer scripts and their component registries",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT",
    packages=find_packages(include=["isscheck", "isscheck.*"]),
    classifiers=classifiers,
    python_requires=python_requires,
    install_requires=install_requires,
    extras_require=extras_require,
    entry_points={
        "console_scripts": [
            "isscheck=isscheck.main:main",
        ],
    },
    zip_safe=False,
)
