# Always prefer setuptools over distutils
from setuptools import setup, find_packages
# To use a consistent encoding
from codecs import open
from os import path

from otsviewer import __version__

here = path.abspath(path.dirname(__file__))

# Get the long description from the README file
with open(path.join(here, 'README.md'), encoding='utf-8') as f:
    long_description = f.read()

setup(
    name='opentimestamps-viewer',

    # Versions should comply with PEP440.
    version=__version__,

    description='Web viewer showing every step of OpenTimestamps proofs',
    long_description=long_description,
    long_description_content_type='text/markdown',

    url='https://github.com/opentimestamps/opentimestamps-viewer',

    license='LGPL3',

    # See https://pypi.python.org/pypi?%3Aaction=list_classifiers
    classifiers=[
        'Development Status :: 4 - Beta',

        'Intended Audience :: Developers',
        'Intended Audience :: End Users/Desktop',
        'Topic :: Security :: Cryptography',

        'License :: OSI Approved :: GNU Lesser General Public License v3 or later (LGPLv3+)',

        'Programming Language :: Python :: 3 :: Only',
    ],

    keywords='cryptography timestamping bitcoin',

    packages=find_packages(exclude=['contrib', 'docs', 'tests']),

    # List run-time dependencies here.  These will be installed by pip when
    # your project is installed.
    install_requires=['opentimestamps>=0.4.5,<0.5.0',
                      'python-bitcoinlib>=0.12.0',
                      'appdirs>=1.3.0',
                      'Flask>=2.0'],

    # $ pip install -e .[test]
    extras_require={
        'test': ['pytest'],
    },

    # Templates and static files for the web viewer
    package_data={
        'otsviewer': ['templates/*.html', 'static/*'],
    },

    entry_points={
        'console_scripts': [
            'ots-viewer = otsviewer.viewer:main',
        ],
    },
)
