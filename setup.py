# -*- coding: utf-8 -*-
from setuptools import setup

packages = ["contactsync", "contactsync.clients"]

package_data = {"": ["*"]}

install_requires = ["requests>=2.27,<3.0", "openpyxl>=3.0,<4.0"]

extras_require = {"test": ["pytest>=7.0"]}

with open("README.md", "r", encoding="utf-8") as f:
    long_description = f.read()

setup_kwargs = {
    "name": "contactsync",
    "version": "0.1.0",
    "description": "Bulk contact import and export for a contacts API.",
    "long_description": long_description,
    "long_description_content_type": "text/markdown",
    "packages": packages,
    "package_data": package_data,
    "install_requires": install_requires,
    "extras_require": extras_require,
    "entry_points": {"console_scripts": ["contactsync=contactsync.__main__:main"]},
    "python_requires": ">=3.8,<4.0",
}


setup(**setup_kwargs)
