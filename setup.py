from setuptools import setup

setup(
    name='pyTexMk',
    version='0.2.0',
    author="Matthew",
    packages=['pytexmk',],
    license=open('LICENSE.md').read(),
    long_description=open('README.rst').read(),
    python_requires='>=3.8',
    install_requires=['PyYAML', 'watchdog'],
    extras_require=dict(test=['pytest']),
    entry_points=dict(
        console_scripts=["pytexmk = pytexmk.command_line:main",])
)
