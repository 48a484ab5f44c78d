import os

import setuptools

INSTALL_REQUIRES = [
    "click>=8.1.7,<9",
    "pydantic>=2.6,<3",
    "PyYAML>=6.0.1,<7",
    "requests>=2.31.0,<3",
    "websocket-client>=1.7.0,<2",
]

EXTRA_REQUIRES = {
    "test": [
        "ddt",
        "pytest>=7.4,<9",
    ],
}


def get_version(pkg_path):
    import re

    with open(os.path.join(pkg_path, "__init__.py"), encoding="utf-8") as f:
        match = re.search(r'^__version__ = "([^"]+)"', f.read(), re.M)
    if match is None:
        raise RuntimeError("Unable to find version string in {}".format(pkg_path))
    return match.group(1)


def get_long_description():
    if not os.path.isfile("README.md"):
        return ""
    with open("README.md", encoding="utf-8") as f:
        return f.read()


if __name__ == "__main__":
    setuptools.setup(
        name="Printerface",
        version=get_version(os.path.join("src", "printerface")),
        description="Client for tracking and controlling the print job of an OctoPrint server",
        long_description=get_long_description(),
        long_description_content_type="text/markdown",
        license="AGPL-3.0-or-later",
        python_requires=">=3.8,<4",
        package_dir={"": "src"},
        packages=setuptools.find_packages(where="src"),
        install_requires=INSTALL_REQUIRES,
        extras_require=EXTRA_REQUIRES,
        entry_points={"console_scripts": ["printerface = printerface.cli:main"]},
        classifiers=[
            "Environment :: Console",
            "License :: OSI Approved :: GNU Affero General Public License v3",
            "Programming Language :: Python :: 3",
            "Topic :: Printing",
        ],
    )
