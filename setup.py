from setuptools import setup

setup(
    name='coreinject',
    version='0.1.0',
    description='Inject binary dumps of a partial core dump back into the core file',
    packages=['coreinject'],
    python_requires='>=3.6',
    install_requires=[
        'pyelftools>=0.25',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'coreinject = coreinject.main:main',
        ],
    },
)
