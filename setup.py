import setuptools

# Read without importing the package, whose dependencies may not be installed yet
version = {}
with open("swiftmfv/__version__.py", "r") as fh:
    exec(fh.read(), version)

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name="swiftmfv",
    version=version["__version__"],
    description="Particle field i/o for the GIZMO-MFV hydrodynamics scheme in python.",
    url="https://github.com/swiftsim/swiftmfv",
    packages=setuptools.find_packages(include=["swiftmfv", "swiftmfv.*"]),
    long_description=long_description,
    long_description_content_type="text/markdown",
    zip_safe=False,
    scripts=["mfvsnap"],
    classifiers=[
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "License :: OSI Approved :: GNU Lesser General Public License v3 or later (LGPLv3+)",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.10",
    install_requires=["numpy", "unyt>=2.3.0", "h5py"],
    extras_require={"test": ["pytest"]},
)
