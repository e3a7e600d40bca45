from setuptools import setup, find_packages

setup(
    name='psySurveyToolbox',
    version='0.1.0',
    packages=find_packages(exclude=['tests', 'tests.*']),
    description='Preprocessing of psychometric questionnaire data: item selection, participant exclusion and subscale scoring.',
    install_requires=[
        'numpy',
        'pandas>=1.5',
        'tqdm',
    ],
    extras_require={
        'test': ['pytest'],
    },
    classifiers=[
        'Programming Language :: Python :: 3',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
    ],
    python_requires='>=3.8',
)
