# setup.py
from setuptools import setup

setup(
    name='microflag',
    version='0.1.0',
    description='Tiny table-driven command-line flag parser with typed destinations',
    long_description='''\
Declare a table of flags (short name, long name, kind, destination, help),
parse sys.argv into your own variables or dataclass fields, and render a
plain help listing from the same table.
''',
    author='Matthew Krafczyk',
    author_email='krafczyk.matthew@gmail.com',
    py_modules=['microflag'],
    python_requires='>=3.10',
    install_requires=[
        # no dependencies outside the stdlib
    ],
    extras_require={
        'test': ['pytest>=7'],
    },
    classifiers=[
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
        'Environment :: Console',
    ],
)
