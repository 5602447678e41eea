"""
Setup file.
"""

import os

from setuptools import find_packages, setup

KEYWORDS = "emscripten webassembly wasm emcc loader bundler c cpp"
HERE = os.path.dirname(os.path.abspath(__file__))


def read_readme() -> str:
    readme = os.path.join(HERE, "README.md")
    if not os.path.exists(readme):
        return ""
    with open(readme, encoding="utf-8") as f:
        return f.read()


if __name__ == "__main__":
    setup(
        name="emloader",
        version="0.1.0",
        description="Compile C/C++ with Emscripten and wrap the glue as a promise-returning module",
        long_description=read_readme(),
        long_description_content_type="text/markdown",
        keywords=KEYWORDS,
        python_requires=">=3.9",
        package_dir={"": "src"},
        packages=find_packages(where="src"),
        install_requires=["psutil"],
        extras_require={"test": ["pytest"]},
        entry_points={"console_scripts": ["emload = emloader.cli:main"]},
        include_package_data=True)
