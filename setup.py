import os
from setuptools import setup, find_packages

def parse_requirements(requirements):
    with open(requirements) as f:
        return [l.strip('\n') for l in f if l.strip('\n') and not l.startswith('#')]

requirements = parse_requirements(os.path.join(os.path.dirname(os.path.abspath(__file__)), "requirements.txt"))

setup(
    name='authz_backend',
    version='0.0.1',
    install_requires=requirements,
    extras_require={
        "test": ["pytest", "httpx"],
    },
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    package_data={"authz_backend": ["assets/*.yaml"]},
    include_package_data=True,
    entry_points={
        "console_scripts": [
            "authz=authz_backend.cli.cli:cli",
        ],
    }
)
