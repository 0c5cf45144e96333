from setuptools import setup, find_packages


PACKAGE_NAME = "build_id"
PACKAGE_VERSION = "0.2.1"
PACKAGE_DESCRIPTION = """Obtain a UUID uniquely representing the build of the running binary,
so independent processes can check they are invocations of the same executable
"""
EXCLUDE_PACKAGES = ["tests", "tests.*"]
INSTALL_REQUIREMENTS = [
    "loguru",
]
EXTRAS_REQUIRE = {
    "test": ["pytest"],
}


setup(
    name=PACKAGE_NAME,
    version=PACKAGE_VERSION,
    description=PACKAGE_DESCRIPTION,
    license="MIT OR Apache-2.0",
    packages=find_packages(exclude=EXCLUDE_PACKAGES),
    install_requires=INSTALL_REQUIREMENTS,
    extras_require=EXTRAS_REQUIRE,
    entry_points={"console_scripts": ["build-id=build_id.__main__:main"]},
    zip_safe=False,
    python_requires=">=3.10",
)
