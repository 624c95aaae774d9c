import re
from setuptools import setup

# kerbrute/__init__.py pulls in impacket, so the version is read without importing the package
with open("kerbrute/_version.py") as f:
	__version__ = re.search(r'__version__ = "(.+?)"', f.read()).group(1)

setup(
	name='kerbrute',
	version=__version__,
	description='Kerberos pre-auth username enumeration, password spraying and AS-REP roasting',
	author='ropnop',
	maintainer='mr-pmillz',
	url='https://github.com/mr-pmillz/kerbrute',
	long_description=open('README.md').read(),
	long_description_content_type='text/markdown',
	packages=[
		'kerbrute',
		'kerbrute.lib',
		'kerbrute.lib.krb5',
		'kerbrute.modules',
		'kerbrute.utils',
	],
	license='MIT',
	python_requires='>=3.8',
	install_requires=[
		'impacket',
		'pyasn1',
		'dnspython',
		'validators',
		'Jinja2',
		'PySocks',
	],
	extras_require={
		'test': ['pytest'],
	},
	classifiers=[
		'Intended Audience :: Information Technology',
		'License :: OSI Approved :: MIT License',
		'Programming Language :: Python :: 3.8',
		'Programming Language :: Python :: 3.9',
		'Programming Language :: Python :: 3.10',
		'Programming Language :: Python :: 3.11',
		'Programming Language :: Python :: 3.12',
	],
	entry_points= {
		'console_scripts': ['kerbrute=kerbrute:main']
	}
)
