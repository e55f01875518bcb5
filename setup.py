# Copyright 2020 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from setuptools import setup, find_packages


setup_args = dict(
    name="svgc",
    use_scm_version={
        "write_to": "src/svgc/_version.py",
        "fallback_version": "0.1.9",
    },
    package_dir={'': 'src'},
    packages=find_packages(where='src'),
    entry_points={
        'console_scripts': [
            'svgc=svgc.svgc:main',
        ],
    },
    install_requires=[
        "absl-py>=0.9.0",
    ],
    extras_require={
        "dev": [
            "lxml>=4.0",
            "pytest",
            "pytest-clarity",
            "black",
        ],
    },
    python_requires=">=3.8",

    # this is for type checker to use our inline type hints:
    # https://www.python.org/dev/peps/pep-0561/#id18
    package_data={"svgc": ["py.typed"]},

    # metadata to display on PyPI
    author="Rod S",
    author_email="rsheeter@google.com",
    description=(
        "Shrinks svg files by dropping comments, whitespace and editor "
        "metadata, optionally chaining svgo and svgz compression"
    ),
)


if __name__ == "__main__":
    setup(**setup_args)
