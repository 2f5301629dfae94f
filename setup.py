"""Install the climate accounts service."""

from setuptools import setup, find_packages

setup(
    name='climate-accounts',
    version='0.1.0',
    packages=find_packages(exclude=['*test*']),
    package_data={'climate_accounts': ['config.py']},
    python_requires='>=3.9',
    install_requires=[
        "flask",
        "werkzeug",
        "wtforms",
        "sqlalchemy>=1.4",
        "redis",
        "retry",
        "python-dateutil",
        "pytz",
        "python-json-logger>=3.1",
    ],
    extras_require={
        'fake': ['fakeredis'],
        'test': ['pytest', 'fakeredis'],
    },
    zip_safe=False
)
