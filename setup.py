#!/usr/bin/env python


__copyright__ = """
Copyright (C) 2026 cloffload contributors
"""

__license__ = """
Permission is hereby granted, free of charge, to any person obtaining a copy
of this software and associated documentation files (the "Software"), to deal
in the Software without restriction, including without limitation the rights
to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
copies of the Software, and to permit persons to whom the Software is
furnished to do so, subject to the following conditions:

The above copyright notice and this permission notice shall be included in
all copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN
THE SOFTWARE.
"""


def main():
    from setuptools import find_packages, setup

    with open("README.rst") as inf:
        long_description = inf.read()

    setup(name="cloffload",
            # metadata
            version="2026.1",
            description="Offload an elementwise vector add to an OpenCL device",
            long_description=long_description,
            long_description_content_type="text/x-rst",
            author="cloffload contributors",
            license="MIT",
            classifiers=[
                "Environment :: Console",
                "Development Status :: 4 - Beta",
                "Intended Audience :: Developers",
                "Intended Audience :: Science/Research",
                "License :: OSI Approved :: MIT License",
                "Natural Language :: English",
                "Programming Language :: Python",
                "Programming Language :: Python :: 3",
                "Topic :: Scientific/Engineering",
                ],

            packages=find_packages(include=["cloffload", "cloffload.*"]),

            python_requires="~=3.10",
            install_requires=[
                "numpy",
                "pyopencl>=2024.1",
                "pytools>=2022.1.13",
                ],
            extras_require={
                "pocl":  ["pocl_binary_distribution>=1.2"],
                "test": ["pytest>=7.0.0"],
            },
            include_package_data=True,
            package_data={
                    "cloffload": [
                        "cl/*.cl",
                        ]
                    },
            entry_points={
                "console_scripts": [
                    "cloffload = cloffload.__main__:main",
                    ],
                },

            zip_safe=False)


if __name__ == "__main__":
    main()

# vim: foldmethod=marker
