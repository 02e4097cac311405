# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="diskusage",
    version="0.3.0",
    description="Concurrent directory size, file count and owner summary with reusable JSON snapshots",
    author="Enrique Paredes",
    author_email="eparedesbalen@gmail.com",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["diskusage", "diskusage.*"]),
    python_requires=">=3.9",
    install_requires=[
        "psutil",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'diskusage=diskusage.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: POSIX",
    ],
)
