#!/usr/bin/env python

from setuptools import setup

setup(
    name="elastictypes",
    version="0.1.0",
    description="Elasticsearch mappings derived from pydantic models",
    author="Wouter van Atteveldt",
    author_email="wouter@vanatteveldt.com",
    packages=["elastictypes", "elastictypes.mapping"],
    include_package_data=True,
    zip_safe=False,
    keywords=["elasticsearch", "mapping", "pydantic"],
    classifiers=[
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Topic :: Database",
    ],
    python_requires=">=3.11",
    install_requires=[
        "elasticsearch[async]~=8.6",
        "pydantic>=2.11",
        "pydantic-core",
        "pydantic-settings",
        "python-dotenv",
        "class_doc",
    ],
    extras_require={
        'dev': [
            'pytest',
            'anyio',
            'mypy',
            'flake8',
            'pre-commit',
        ]
    },
    entry_points={
        'console_scripts': [
            'elastictypes = elastictypes.__main__:main'
        ]
    },
)
