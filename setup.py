from setuptools import find_packages, setup

setup(
    name="patient-bed-simulator",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    package_data={
        "patient_bed.mqtt": ["schemas/*.json"],
    },
    python_requires=">=3.9",
    install_requires=[
        "paho-mqtt>=2.0",
        "jsonschema>=4.0",
        "python-dotenv>=1.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "patient-bed-simulator=patient_bed.cli:main",
        ],
    },
)
