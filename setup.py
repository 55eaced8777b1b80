import os
from setuptools import setup, find_packages

HERE = os.path.abspath(os.path.dirname(__file__))


def read_requirements(filename):
    """Read requirements from a file, handling -r references."""
    requirements = []
    path = os.path.join(HERE, 'requirements', filename)
    if not os.path.exists(path):
        return requirements

    with open(path) as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith('#'):
                if line.startswith('-r '):
                    # Handle requirement file references
                    requirements.extend(read_requirements(line.split(' ')[1]))
                else:
                    requirements.append(line)
    return requirements


# Read requirements
base_reqs = read_requirements('base.txt')
dev_reqs = [r for r in read_requirements('dev.txt') if r not in base_reqs]
prod_reqs = [r for r in read_requirements('prod.txt') if r not in base_reqs]

setup(
    name="dynamoscan",
    version="0.1.0",
    description="Heuristic exploit and vulnerability detection for Solana transactions and programs",
    long_description=(
        (lambda p: (open(p, encoding='utf-8').read() if os.path.exists(p) else ""))('DESIGN.md')
    ),
    long_description_content_type='text/markdown',
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.9",
    install_requires=base_reqs,
    extras_require={
        'dev': dev_reqs,
        'test': dev_reqs,
        'prod': prod_reqs,
        'all': list(set(dev_reqs + prod_reqs))
    },
    entry_points={
        "console_scripts": [
            "dynamoscan=dynamoscan.cli.main:main",
        ],
    },
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'Topic :: Security',
        'Programming Language :: Python :: 3',
    ],
    keywords='solana security exploit-detection bytecode heuristics',
    include_package_data=True,
    zip_safe=False,
)
