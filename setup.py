import glob
import os

from setuptools import find_packages, setup

top_level_modules = [
    os.path.splitext(os.path.basename(p))[0]
    for p in glob.glob('src/*.py')
    if not p.endswith('__init__.py')
]

setup(
    name='crawchain',
    version='0.1.0',
    packages=find_packages(where='src', exclude=['tests', 'tests.*']),
    package_dir={'': 'src'},
    py_modules=top_level_modules,
    include_package_data=True,
    description='CrawChain sharded ledger service',
    python_requires='>=3.10',
    install_requires=[
        'fastapi>=0.110',
        'uvicorn>=0.29',
        'pydantic>=2.5',
        'prometheus-client>=0.20',
        'cryptography>=42.0',
        'loguru>=0.7',
        'wasmtime>=20.0',
    ],
    extras_require={
        'test': [
            'pytest>=8.0',
            'httpx>=0.27',
        ],
    },
    entry_points={
        'console_scripts': [
            'crawchain=main:main',
        ],
    },
)
