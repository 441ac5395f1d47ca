from setuptools import find_namespace_packages, setup

package_name = 'gauss_newton_icp'

setup(
    name=package_name,
    version='0.1.0',
    packages=find_namespace_packages(include=[package_name, package_name + '.*']),
    python_requires='>=3.10',
    install_requires=[
        'setuptools',
        'numpy>=1.24',
        'scipy>=1.11',
        'pyyaml>=6.0',
    ],
    extras_require={
        'visualization': [
            'open3d>=0.17.0',
            'matplotlib>=3.7',
        ],
        'test': [
            'pytest>=7.0',
        ],
    },
    zip_safe=True,
    maintainer='gauss_newton_icp maintainers',
    maintainer_email='maintainers@example.org',
    description='Gauss-Newton SE(3) optimizer for point, line and plane pairings',
    license='TODO: License declaration',
    entry_points={
        'console_scripts': [
            "gauss_newton_icp = gauss_newton_icp.local.cli_launch:main"
        ],
    },
)
