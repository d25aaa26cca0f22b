from setuptools import setup, find_packages

setup(
    name='progresswheel',
    version='0.1.0',
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires='>=3.10',
    install_requires=[
        'pydantic>=2,<3',
        'pygame>=2.1',
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    description='progresswheel is a Material style animated progress wheel with a pygame demo.',
    entry_points={
        'console_scripts': [
            'progresswheel = wheeldemo.wheeldemo:cmdline',
        ],
    },
)
