# type: ignore
from setuptools import find_packages, setup

# Get VERSION constant from growthbook_openfeature.version - we can't simply import that module because
# growthbook_openfeature/__init__.py imports dependencies we may not have loaded yet. Based on
# https://packaging.python.org/guides/single-sourcing-package-version/
version_module_globals = {}
with open('./growthbook_openfeature/version.py') as f:
    exec(f.read(), version_module_globals)
provider_version = version_module_globals['VERSION']


def parse_requirements(filename):
    """ load requirements from a pip requirements file """
    lineiter = (line.strip() for line in open(filename))
    return [line for line in lineiter if line and not line.startswith("#")]


reqs = parse_requirements('requirements.txt')
testreqs = parse_requirements('test-requirements.txt')

setup(
    name='growthbook-openfeature-provider',
    version=provider_version,
    packages=find_packages(include=['growthbook_openfeature', 'growthbook_openfeature.*']),
    description='GrowthBook provider for the OpenFeature Python SDK',
    long_description='GrowthBook provider for the OpenFeature Python SDK',
    install_requires=reqs,
    python_requires='>=3.8',
    classifiers=[
        'Intended Audience :: Developers',
        'Operating System :: OS Independent',
        'Programming Language :: Python :: 3',
        'Topic :: Software Development',
        'Topic :: Software Development :: Libraries',
    ],
    extras_require={
        "test": testreqs,
    },
)
