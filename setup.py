import setuptools

with open('requirements.txt') as f:
    install_requires = f.read().strip().split('\n')


setuptools.setup(name="pogkit",
                 version="0.1.0",
                 author="Rena Elkin",
                 description="Partial order graphs for ancestral sequence reconstruction: construction, pruning, ordering, consensus and DOT export",
                 install_requires=install_requires,
                 extras_require={'test': ['pytest']},
                 packages=setuptools.find_packages(exclude=['tests', 'tests.*']),
)
