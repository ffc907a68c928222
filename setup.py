from setuptools import setup, find_packages
setup(
  name = 'usbctrl',
  packages = find_packages(exclude=['tests', 'tests.*']),
  version = '0.1',
  license='Apache-2.0',
  description = 'Hotplug-aware USB device registry with asynchronous connect/disconnect callbacks',
  keywords = ['USB', 'udev', 'hotplug'],
  python_requires='>=3.8',
  install_requires=[
          'loguru>=0.6.0',
          'pyudev>=0.24.0',
      ],
  extras_require={
          'test': [
              'pytest>=7.0.0',
              'pytest-mock>=3.10.0',
          ],
      },
  entry_points={
          'console_scripts': [
              'usbctrl=usbctrl.cli:main',
          ],
      },
  classifiers=[
    'Development Status :: 3 - Alpha',
    'Intended Audience :: Developers',
    'Topic :: System :: Hardware',
    'License :: OSI Approved :: Apache Software License',
    'Operating System :: POSIX :: Linux',
    'Programming Language :: Python :: 3',
    'Programming Language :: Python :: 3.8',
    'Programming Language :: Python :: 3.9',
    'Programming Language :: Python :: 3.10',
    'Programming Language :: Python :: 3.11',
  ],
)
